"""Sitemap rendering and generated-module emission."""

import logging
import os
from html import escape as html_escape
from typing import Iterable, Sequence, Tuple, Union

from lxml import etree

from .config import SITEMAP_NAMESPACE, SITEMAP_SCHEMA_LOCATION, XSI_NAMESPACE
from .types import ChangeFrequency, SitemapEntry
from .utils import create_directory_if_not_exists

logger = logging.getLogger(__name__)

EntryLike = Union[SitemapEntry, Tuple[str, str, float]]

XML_HEADER = '<?xml version="1.0" encoding="utf-8"?>'
URLSET_OPEN = (
    f'<urlset xmlns:xsi="{XSI_NAMESPACE}"\n'
    f'        xsi:schemaLocation="{SITEMAP_NAMESPACE} {SITEMAP_SCHEMA_LOCATION}"\n'
    f'        xmlns="{SITEMAP_NAMESPACE}">'
)
URLSET_CLOSE = "</urlset>"
URL_TEMPLATE = (
    "    <url>\n"
    "        <loc>{loc}</loc>\n"
    "        <changefreq>{changefreq}</changefreq>\n"
    "        <priority>{priority}</priority>\n"
    "    </url>"
)

GENERATED_HEADER = "# Generated by sitemap-codegen. Do not edit.\n"
VALID_CHANGEFREQS = frozenset(freq.value for freq in ChangeFrequency)


def format_priority(priority: float) -> str:
    """Shortest text that reads back as the same number: 1, 0.5, 0.75."""
    value = float(priority)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def join_location(base_url: str, template: str) -> str:
    """Prefix ``template`` with ``base_url``; a slash on both sides is kept once."""
    if base_url.endswith("/") and template.startswith("/"):
        return base_url + template[1:]
    return base_url + template


def _as_literal(entry: EntryLike) -> Tuple[str, str, float]:
    if isinstance(entry, SitemapEntry):
        return entry.as_literal()
    template, changefreq, priority = entry
    return template, changefreq, priority


def render_sitemap(base_url: str, entries: Iterable[EntryLike], escape: bool = False) -> str:
    """
    Render the sitemap document for ``entries`` under ``base_url``.

    Args:
        base_url: Prefix for every route template (see join_location)
        entries: Sitemap entries or their literal tuples, in output order
        escape: XML-escape the location; off by default, so a template
            containing ``&`` or ``<`` yields a malformed document

    Returns:
        The XML document text
    """
    lines = [XML_HEADER, URLSET_OPEN]

    for entry in entries:
        template, changefreq, priority = _as_literal(entry)
        loc = join_location(base_url, template)
        if escape:
            loc = html_escape(loc, quote=False)
        lines.append(
            URL_TEMPLATE.format(
                loc=loc,
                changefreq=changefreq,
                priority=format_priority(priority),
            )
        )

    lines.append(URLSET_CLOSE)
    return "\n".join(lines) + "\n"


def emit_module(entries: Sequence[EntryLike], escape: bool = False) -> str:
    """Python source of the module that serves ``entries`` at request time."""
    literals = [_as_literal(entry) for entry in entries]

    lines = [
        GENERATED_HEADER,
        "from sitemap_codegen.endpoint import register_sitemap",
        "",
    ]
    if literals:
        lines.append("SITEMAP_ENTRIES = (")
        lines.extend(f"    {literal!r}," for literal in literals)
        lines.append(")")
    else:
        lines.append("SITEMAP_ENTRIES = ()")

    lines.extend([
        "",
        "",
        "def map_sitemap(app, url):",
        '    """Serve sitemap.xml for the annotated components under ``url``."""',
        f"    return register_sitemap(app, url, SITEMAP_ENTRIES, escape={escape!r})",
    ])
    return "\n".join(lines) + "\n"


def is_up_to_date(filepath: str, source: str) -> bool:
    """True when ``filepath`` already holds exactly ``source``."""
    if not os.path.exists(filepath):
        return False
    with open(filepath, "r", encoding="utf-8") as f:
        return f.read() == source


def write_module(filepath: str, source: str) -> bool:
    """Write the generated module if its content changed. Returns True when written."""
    try:
        if is_up_to_date(filepath, source):
            logger.info(f"Generated module is up to date: {filepath}")
            return False

        create_directory_if_not_exists(os.path.dirname(filepath))
        with open(filepath, "w", encoding="utf-8", newline="\n") as f:
            f.write(source)

        logger.info(f"Wrote generated module: {filepath}")
        return True

    except OSError as e:
        logger.error(f"Error writing generated module to {filepath}: {e}")
        raise


def validate_sitemap(xml_text: str) -> bool:
    """Validate a rendered sitemap document."""
    try:
        root = etree.fromstring(xml_text.encode("utf-8"))
    except etree.XMLSyntaxError as e:
        logger.error(f"Sitemap is not well-formed XML: {e}")
        return False

    if root.tag != f"{{{SITEMAP_NAMESPACE}}}urlset":
        logger.error(f"Invalid root element: {root.tag}")
        return False

    for url_elem in root.findall(f"{{{SITEMAP_NAMESPACE}}}url"):
        loc = url_elem.findtext(f"{{{SITEMAP_NAMESPACE}}}loc")
        if not loc:
            logger.error("URL missing location")
            return False

        changefreq = url_elem.findtext(f"{{{SITEMAP_NAMESPACE}}}changefreq")
        if changefreq not in VALID_CHANGEFREQS:
            logger.error(f"Invalid changefreq {changefreq!r} for {loc}")
            return False

        priority = url_elem.findtext(f"{{{SITEMAP_NAMESPACE}}}priority")
        try:
            if not 0.0 <= float(priority) <= 1.0:
                raise ValueError(priority)
        except (TypeError, ValueError):
            logger.error(f"Invalid priority {priority!r} for {loc}")
            return False

    return True
