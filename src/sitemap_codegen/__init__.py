"""
Sitemap Code Generator

Builds a sitemap.xml endpoint from decorated web component classes.

Key Features:
- Reads route and sitemap_url decorators from source without importing it
- Emits a module embedding the sitemap entries as literal data
- Serves the sitemap from FastAPI, rendered per request
- Silently skips classes whose decorators do not fully qualify, with an
  optional report of what was left out
"""

__version__ = "1.0.0"

from .annotations import ChangeFreq, route, sitemap_url
from .types import ChangeFrequency, SitemapEntry, GeneratorConfig, ScanResult
from .scanner import scan_declarations, scan_paths, scan_source
from .renderer import emit_module, render_sitemap
from .endpoint import register_sitemap
from .config import get_config_from_env
from .main import main

__all__ = [
    "ChangeFreq",
    "route",
    "sitemap_url",
    "ChangeFrequency",
    "SitemapEntry",
    "GeneratorConfig",
    "ScanResult",
    "scan_declarations",
    "scan_paths",
    "scan_source",
    "emit_module",
    "render_sitemap",
    "register_sitemap",
    "get_config_from_env",
    "main"
]
