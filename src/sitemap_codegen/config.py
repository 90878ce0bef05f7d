"""Configuration and constants for the sitemap code generator."""

import os
from typing import Dict

from .annotations import ROUTE_ANNOTATION
from .types import ChangeFrequency, GeneratorConfig

# Sources and output
DEFAULT_SOURCE_PATHS = ["."]
DEFAULT_OUTPUT_PATH = "sitemap_generated.py"

# Decorator names as they must be written on a class to make it a candidate
DEFAULT_ROUTE_ANNOTATION = ROUTE_ANNOTATION
DEFAULT_SITEMAP_ANNOTATION = "sitemap_url"

# Signature of sitemap_url(), in binding order
SITEMAP_PARAMETERS = ("change_freq", "priority")
SITEMAP_DEFAULTS = {"change_freq": 0, "priority": 0.5}
ROUTE_PARAMETER = "template"

# sitemaps.org namespaces
SITEMAP_NAMESPACE = "http://www.sitemaps.org/schemas/sitemap/0.9"
SITEMAP_SCHEMA_LOCATION = "http://www.sitemaps.org/schemas/sitemap/0.9/sitemap.xsd"
XSI_NAMESPACE = "http://www.w3.org/2001/XMLSchema-instance"

# Ordinal 0 and anything unknown fall back to ALWAYS
CHANGEFREQ_BY_ORDINAL: Dict[int, ChangeFrequency] = {
    1: ChangeFrequency.HOURLY,
    2: ChangeFrequency.DAILY,
    3: ChangeFrequency.WEEKLY,
    4: ChangeFrequency.MONTHLY,
    5: ChangeFrequency.YEARLY,
    6: ChangeFrequency.NEVER,
}

MIN_PRIORITY = 0.0
MAX_PRIORITY = 1.0


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() == "true"


def get_config_from_env() -> GeneratorConfig:
    """Create configuration from environment variables with defaults."""
    sources_str = os.getenv("SITEMAP_CODEGEN_SOURCES", ",".join(DEFAULT_SOURCE_PATHS))
    source_paths = [path.strip() for path in sources_str.split(",") if path.strip()]

    return GeneratorConfig(
        source_paths=source_paths or list(DEFAULT_SOURCE_PATHS),
        output_path=os.getenv("SITEMAP_CODEGEN_OUTPUT", DEFAULT_OUTPUT_PATH),
        route_annotation=os.getenv(
            "SITEMAP_CODEGEN_ROUTE_ANNOTATION", DEFAULT_ROUTE_ANNOTATION
        ),
        sitemap_annotation=os.getenv(
            "SITEMAP_CODEGEN_SITEMAP_ANNOTATION", DEFAULT_SITEMAP_ANNOTATION
        ),
        escape_xml=_env_flag("SITEMAP_CODEGEN_ESCAPE_XML"),
        report_omitted=_env_flag("SITEMAP_CODEGEN_REPORT_OMITTED"),
    )


def changefreq_from_ordinal(ordinal: int) -> ChangeFrequency:
    """Map a ChangeFreq ordinal to its sitemap keyword."""
    return CHANGEFREQ_BY_ORDINAL.get(ordinal, ChangeFrequency.ALWAYS)


def clamp_priority(priority: float) -> float:
    """Clamp priority into [0, 1]."""
    return float(max(MIN_PRIORITY, min(MAX_PRIORITY, priority)))
