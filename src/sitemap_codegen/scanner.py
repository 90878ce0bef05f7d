"""Declaration scanner: turns annotated component classes into sitemap entries."""

import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .annotations import ROUTE_ANNOTATION, SITEMAP_ANNOTATION
from .config import (
    DEFAULT_ROUTE_ANNOTATION,
    DEFAULT_SITEMAP_ANNOTATION,
    ROUTE_PARAMETER,
    SITEMAP_DEFAULTS,
    SITEMAP_PARAMETERS,
    changefreq_from_ordinal,
    clamp_priority,
)
from .inspector import inspect_file, inspect_source, iter_source_files
from .types import (
    Annotation,
    ClassDeclaration,
    GeneratorConfig,
    OmittedDeclaration,
    ScanResult,
    SitemapEntry,
)
from .utils import format_number

logger = logging.getLogger(__name__)


class _Malformed(Exception):
    """Internal signal: the declaration does not qualify. Never escapes."""


def _written_names(config: Optional[GeneratorConfig]) -> Tuple[str, str]:
    if config is None:
        return DEFAULT_ROUTE_ANNOTATION, DEFAULT_SITEMAP_ANNOTATION
    return config.route_annotation, config.sitemap_annotation


def is_candidate(
    declaration: ClassDeclaration,
    route_name: str = DEFAULT_ROUTE_ANNOTATION,
    sitemap_name: str = DEFAULT_SITEMAP_ANNOTATION,
) -> bool:
    """
    Syntactic filter over the decorators as written.

    The route decorator must be spelled with its qualified name while the
    sitemap decorator is matched by its bare name.
    """
    has_route = False
    has_sitemap = False

    for annotation in declaration.annotations:
        name = annotation.written_name

        if not has_route and name == route_name:
            if has_sitemap:
                return True
            has_route = True

        if not has_sitemap and name == sitemap_name:
            if has_route:
                return True
            has_sitemap = True

    return False


def _first(declaration: ClassDeclaration, qualified: str) -> Annotation:
    for annotation in declaration.annotations:
        if annotation.name == qualified:
            return annotation
    raise _Malformed(f"no decorator resolves to {qualified}")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _route_template(annotation: Annotation) -> str:
    if not annotation.resolved:
        raise _Malformed("route arguments are not literals")
    if annotation.arity != 1:
        raise _Malformed(f"route takes 1 argument, got {annotation.arity}")

    if annotation.args:
        template = annotation.args[0]
    else:
        key, template = annotation.kwargs[0]
        if key != ROUTE_PARAMETER:
            raise _Malformed(f"unexpected route keyword {key!r}")

    if not isinstance(template, str):
        raise _Malformed(f"route template is {type(template).__name__}, not str")
    return template


def _bind_sitemap(annotation: Annotation) -> Dict[str, Any]:
    """Bind decorator arguments the way sitemap_url() would, defaults included."""
    if not annotation.resolved:
        raise _Malformed("sitemap_url arguments are not literals")
    if len(annotation.args) > len(SITEMAP_PARAMETERS):
        raise _Malformed(
            f"sitemap_url takes {len(SITEMAP_PARAMETERS)} arguments, got {annotation.arity}"
        )

    bound = dict(zip(SITEMAP_PARAMETERS, annotation.args))
    for key, value in annotation.kwargs:
        if key not in SITEMAP_PARAMETERS or key in bound:
            raise _Malformed(f"unexpected sitemap_url keyword {key!r}")
        bound[key] = value

    for key, default in SITEMAP_DEFAULTS.items():
        bound.setdefault(key, default)
    return bound


def _extract(declaration: ClassDeclaration) -> SitemapEntry:
    template = _route_template(_first(declaration, ROUTE_ANNOTATION))
    bound = _bind_sitemap(_first(declaration, SITEMAP_ANNOTATION))

    ordinal = bound["change_freq"]
    if not isinstance(ordinal, int) or isinstance(ordinal, bool):
        raise _Malformed(f"change_freq is {type(ordinal).__name__}, not int")

    priority = bound["priority"]
    if not _is_number(priority):
        raise _Malformed(f"priority is {type(priority).__name__}, not a number")

    return SitemapEntry(
        template=template,
        changefreq=changefreq_from_ordinal(ordinal),
        priority=clamp_priority(priority),
    )


def extract_entry(declaration: ClassDeclaration) -> Optional[SitemapEntry]:
    """Sitemap entry for a candidate declaration, or None when it does not qualify."""
    try:
        return _extract(declaration)
    except _Malformed:
        return None


def _omission_reason(declaration: ClassDeclaration, route_name: str, sitemap_name: str) -> Optional[str]:
    """Why a decorated class was left out, or None if it is unrelated to sitemaps."""
    written = {a.written_name for a in declaration.annotations}
    resolved = {a.name for a in declaration.annotations}
    has_route = route_name in written or ROUTE_ANNOTATION in resolved
    has_sitemap = sitemap_name in written or SITEMAP_ANNOTATION in resolved

    if not has_route and not has_sitemap:
        return None
    if not has_route:
        return f"missing {route_name} decorator"
    if not has_sitemap:
        return f"missing {sitemap_name} decorator"
    if not is_candidate(declaration, route_name, sitemap_name):
        return f"decorators must be written as {route_name} and {sitemap_name}"

    try:
        _extract(declaration)
    except _Malformed as e:
        return str(e)
    return None


def scan_declarations(
    declarations: Iterable[ClassDeclaration],
    config: Optional[GeneratorConfig] = None,
    diagnostics: Optional[List[OmittedDeclaration]] = None,
) -> List[SitemapEntry]:
    """
    Produce sitemap entries for qualifying declarations, in discovery order.

    Declarations that do not qualify are skipped silently. When a
    ``diagnostics`` list is given, skipped declarations carrying one of the
    two decorators are appended to it as well; the returned entries are the
    same either way.
    """
    route_name, sitemap_name = _written_names(config)
    entries: List[SitemapEntry] = []

    for declaration in declarations:
        if not declaration.annotations:
            continue

        entry = None
        if is_candidate(declaration, route_name, sitemap_name):
            entry = extract_entry(declaration)

        if entry is not None:
            entries.append(entry)
            continue

        if diagnostics is not None:
            reason = _omission_reason(declaration, route_name, sitemap_name)
            if reason:
                omitted = OmittedDeclaration(declaration, reason)
                logger.warning(f"Omitted from sitemap: {omitted.describe()}")
                diagnostics.append(omitted)

    return entries


def scan_source(
    source,
    module: str = "",
    config: Optional[GeneratorConfig] = None,
    diagnostics: Optional[List[OmittedDeclaration]] = None,
) -> List[SitemapEntry]:
    """Scan a single source string."""
    return scan_declarations(inspect_source(source, module), config, diagnostics)


def scan_paths(paths: Iterable[str], config: Optional[GeneratorConfig] = None) -> ScanResult:
    """Scan files and directories and collect entries from every module."""
    result = ScanResult()
    diagnostics = [] if config is not None and config.report_omitted else None

    declarations: List[ClassDeclaration] = []
    for path, module, is_package in iter_source_files(paths):
        declarations.extend(inspect_file(path, module, is_package))
        result.files_scanned += 1

    result.classes_scanned = len(declarations)
    result.entries = scan_declarations(declarations, config, diagnostics)
    result.omitted = diagnostics or []

    logger.info(
        f"Scanned {format_number(result.files_scanned)} files, "
        f"{format_number(result.classes_scanned)} classes: "
        f"{format_number(len(result.entries))} sitemap entries"
    )
    return result
