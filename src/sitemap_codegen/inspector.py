"""Declaration inspector: reads class decorators from Python source.

User code is never imported. Decorator names are resolved through the
module's imports and their arguments are evaluated as literals, which is all
the scanner needs to build sitemap entries at build time.
"""

import ast
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set, Tuple

from .annotations import CHANGE_FREQ_ENUM, REEXPORTED_NAMES, ChangeFreq
from .types import Annotation, ClassDeclaration

logger = logging.getLogger(__name__)


class SourceParseError(ValueError):
    """Raised when a source file cannot be read as Python."""


class _NotLiteral(Exception):
    pass


def dotted_name(node: ast.AST) -> Optional[str]:
    """Return ``a.b.c`` for a Name/Attribute chain, None for anything else."""
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        base = dotted_name(node.value)
        if base is not None:
            return f"{base}.{node.attr}"
    return None


def canonical_name(qualified: str) -> str:
    """Rewrite names re-exported by the package to their defining module."""
    for alias, target in REEXPORTED_NAMES.items():
        if qualified == alias or qualified.startswith(alias + "."):
            return target + qualified[len(alias):]
    return qualified


def _package_of(module: str, is_package: bool) -> str:
    if is_package:
        return module
    return module.rpartition(".")[0]


def _module_scope(body: List[ast.stmt]) -> Iterable[ast.stmt]:
    """Statements executed at module level, including inside top-level if/try."""
    for node in body:
        yield node
        if isinstance(node, ast.If):
            yield from _module_scope(node.body)
            yield from _module_scope(node.orelse)
        elif isinstance(node, (ast.Try, getattr(ast, "TryStar", ast.Try))):
            yield from _module_scope(node.body)
            for handler in node.handlers:
                yield from _module_scope(handler.body)
            yield from _module_scope(node.orelse)
            yield from _module_scope(node.finalbody)


def collect_imports(tree: ast.Module, module: str = "", is_package: bool = False) -> Dict[str, str]:
    """Map each name bound by a module-level import to its qualified target."""
    imports: Dict[str, str] = {}

    for node in _module_scope(tree.body):
        if isinstance(node, ast.Import):
            for alias in node.names:
                if alias.asname:
                    imports[alias.asname] = alias.name
                else:
                    head = alias.name.split(".")[0]
                    imports[head] = head

        elif isinstance(node, ast.ImportFrom):
            if node.level:
                package = _package_of(module, is_package).split(".") if module else []
                keep = len(package) - (node.level - 1)
                if keep < 0:
                    # beyond the top-level package
                    continue
                parts = package[:keep]
                if node.module:
                    parts.append(node.module)
                source = ".".join(p for p in parts if p)
            else:
                source = node.module or ""

            for alias in node.names:
                if alias.name == "*":
                    continue
                target = f"{source}.{alias.name}" if source else alias.name
                imports[alias.asname or alias.name] = target

    return imports


def _top_level_names(tree: ast.Module) -> Set[str]:
    names: Set[str] = set()
    for node in tree.body:
        if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef)):
            names.add(node.name)
        elif isinstance(node, ast.Assign):
            for target in node.targets:
                if isinstance(target, ast.Name):
                    names.add(target.id)
        elif isinstance(node, ast.AnnAssign) and isinstance(node.target, ast.Name):
            names.add(node.target.id)
    return names


class _DeclarationCollector(ast.NodeVisitor):
    """Collects class declarations in source order."""

    def __init__(self, module: str, path: str, imports: Dict[str, str], top_level: Set[str]):
        self.module = module
        self.path = path
        self.imports = imports
        self.top_level = top_level
        self.declarations: List[ClassDeclaration] = []
        self._scope: List[str] = []

    def resolve(self, written: str) -> Optional[str]:
        head, _, rest = written.partition(".")
        if head in self.imports:
            base = self.imports[head]
        elif head in self.top_level and self.module:
            base = f"{self.module}.{head}"
        else:
            return None
        return canonical_name(f"{base}.{rest}" if rest else base)

    def visit_ClassDef(self, node: ast.ClassDef) -> None:
        qualname = ".".join(self._scope + [node.name])
        self.declarations.append(
            ClassDeclaration(
                name=node.name,
                qualname=qualname,
                module=self.module,
                path=self.path,
                lineno=node.lineno,
                annotations=tuple(self._annotation(d) for d in node.decorator_list),
            )
        )
        self._scope.append(node.name)
        self.generic_visit(node)
        self._scope.pop()

    def visit_FunctionDef(self, node) -> None:
        self._scope.extend([node.name, "<locals>"])
        self.generic_visit(node)
        del self._scope[-2:]

    visit_AsyncFunctionDef = visit_FunctionDef

    def _annotation(self, decorator: ast.expr) -> Annotation:
        call = decorator if isinstance(decorator, ast.Call) else None
        target = call.func if call is not None else decorator

        written = dotted_name(target)
        if written is None:
            return Annotation(written_name=ast.unparse(target), name=None, resolved=False)

        name = self.resolve(written)
        if call is None:
            return Annotation(written_name=written, name=name)

        try:
            args = tuple(self._literal(arg) for arg in call.args)
            kwargs = tuple((kw.arg, self._literal(kw.value)) for kw in call.keywords)
        except _NotLiteral:
            return Annotation(written_name=written, name=name, resolved=False)

        return Annotation(written_name=written, name=name, args=args, kwargs=kwargs)

    def _literal(self, node: ast.AST):
        if isinstance(node, ast.Starred):
            raise _NotLiteral()
        try:
            return ast.literal_eval(node)
        except (ValueError, TypeError, SyntaxError):
            pass

        written = dotted_name(node)
        qualified = self.resolve(written) if written else None
        if qualified:
            owner, _, member = qualified.rpartition(".")
            if owner == CHANGE_FREQ_ENUM and member in ChangeFreq.__members__:
                return int(ChangeFreq[member])
        raise _NotLiteral()


def inspect_source(
    source,
    module: str = "",
    path: str = "<string>",
    is_package: bool = False,
) -> List[ClassDeclaration]:
    """Return every class declared in ``source`` with resolved decorators."""
    try:
        tree = ast.parse(source, filename=path)
    except (SyntaxError, ValueError) as e:
        raise SourceParseError(f"Cannot parse {path}: {e}") from e

    collector = _DeclarationCollector(
        module, path, collect_imports(tree, module, is_package), _top_level_names(tree)
    )
    collector.visit(tree)
    return collector.declarations


def inspect_file(path: Path, module: str, is_package: bool = False) -> List[ClassDeclaration]:
    """Read and inspect one source file."""
    logger.debug(f"Inspecting {path} as module {module or '<unnamed>'}")
    return inspect_source(path.read_bytes(), module, str(path), is_package)


def module_name_for(path: Path, root: Path) -> str:
    """Dotted module name of ``path``, including enclosing packages of ``root``."""
    rel = path.relative_to(root).with_suffix("")
    parts = list(rel.parts)
    if parts and parts[-1] == "__init__":
        parts.pop()

    package = root
    while (package / "__init__.py").is_file():
        parts.insert(0, package.name)
        package = package.parent

    return ".".join(parts) or path.stem


def _skipped(rel: Path) -> bool:
    return any(part.startswith(".") or part == "__pycache__" for part in rel.parts[:-1])


def iter_source_files(paths: Iterable[str]) -> List[Tuple[Path, str, bool]]:
    """
    Expand files and directories into ``(path, module, is_package)`` triples.

    Directories are walked recursively and sorted so that repeated runs see
    the same order. A file reached twice is only listed once.
    """
    seen: Set[Path] = set()
    result: List[Tuple[Path, str, bool]] = []

    for raw in paths:
        base = Path(raw)
        if base.is_dir():
            root = base
            candidates = sorted(
                (p for p in base.rglob("*.py") if not _skipped(p.relative_to(base))),
                key=lambda p: p.relative_to(base).as_posix(),
            )
        elif base.is_file():
            root = base.parent
            candidates = [base]
        else:
            raise FileNotFoundError(f"Source path does not exist: {raw}")

        for candidate in candidates:
            key = candidate.resolve()
            if key in seen:
                continue
            seen.add(key)
            result.append(
                (candidate, module_name_for(candidate, root), candidate.name == "__init__.py")
            )

    return result
