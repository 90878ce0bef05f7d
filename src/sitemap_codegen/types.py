"""Type definitions for the sitemap code generator."""

from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple
from enum import Enum


class ChangeFrequency(Enum):
    """Sitemap change frequency values."""
    ALWAYS = "always"
    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"
    NEVER = "never"


@dataclass(frozen=True)
class SitemapEntry:
    """Entry extracted from one annotated class."""
    template: str
    changefreq: ChangeFrequency
    priority: float

    def as_literal(self) -> Tuple[str, str, float]:
        """Plain tuple form embedded in generated source."""
        return (self.template, self.changefreq.value, self.priority)


@dataclass(frozen=True)
class Annotation:
    """A class decorator as seen by the declaration inspector."""
    written_name: str
    name: Optional[str]
    args: Tuple[Any, ...] = ()
    kwargs: Tuple[Tuple[str, Any], ...] = ()
    resolved: bool = True

    @property
    def arity(self) -> int:
        return len(self.args) + len(self.kwargs)


@dataclass(frozen=True)
class ClassDeclaration:
    """A class definition found in a source file."""
    name: str
    qualname: str
    module: str
    path: str
    lineno: int
    annotations: Tuple[Annotation, ...] = ()


@dataclass(frozen=True)
class OmittedDeclaration:
    """A decorated class that did not produce a sitemap entry."""
    declaration: ClassDeclaration
    reason: str

    def describe(self) -> str:
        decl = self.declaration
        return f"{decl.path}:{decl.lineno} {decl.module}.{decl.qualname}: {self.reason}"


@dataclass
class ScanResult:
    """Outcome of one scan pass over a set of sources."""
    entries: List[SitemapEntry] = field(default_factory=list)
    omitted: List[OmittedDeclaration] = field(default_factory=list)
    files_scanned: int = 0
    classes_scanned: int = 0


@dataclass
class GeneratorConfig:
    """Configuration for the generator."""
    source_paths: List[str] = field(default_factory=lambda: ["."])
    output_path: str = "sitemap_generated.py"
    route_annotation: str = "sitemap_codegen.annotations.route"
    sitemap_annotation: str = "sitemap_url"
    escape_xml: bool = False
    report_omitted: bool = False
