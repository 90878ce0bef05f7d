"""Tests for the declaration inspector."""

import ast
import pytest
from sitemap_codegen.inspector import (
    SourceParseError,
    collect_imports,
    inspect_source,
    iter_source_files,
    module_name_for,
)


def test_import_forms_are_resolved():
    """Every import form binds the expected qualified name."""
    tree = ast.parse(
        "import os.path\n"
        "import sitemap_codegen.annotations as ann\n"
        "from sitemap_codegen.annotations import route\n"
        "from sitemap_codegen.annotations import sitemap_url as sm\n"
        "from somewhere import *\n"
    )

    imports = collect_imports(tree)

    assert imports == {
        "os": "os",
        "ann": "sitemap_codegen.annotations",
        "route": "sitemap_codegen.annotations.route",
        "sm": "sitemap_codegen.annotations.sitemap_url",
    }


@pytest.mark.parametrize("source,is_package,expected", [
    ("from .widgets import card", False, "app.pages.widgets.card"),
    ("from ..lib import seo", False, "app.lib.seo"),
    ("from . import views", False, "app.pages.views"),
    ("from .widgets import card", True, "app.pages.home.widgets.card"),
])
def test_relative_imports(source, is_package, expected):
    imports = collect_imports(ast.parse(source), "app.pages.home", is_package)

    assert list(imports.values()) == [expected]


def test_relative_import_beyond_top_level_ignored():
    imports = collect_imports(ast.parse("from .... import x"), "app.home")

    assert imports == {}


def test_declarations_in_source_order():
    source = """
class A:
    class B:
        pass

def factory():
    class C:
        pass
    return C

class D:
    pass
"""
    declarations = inspect_source(source, "app.mod", "mod.py")

    assert [d.qualname for d in declarations] == ["A", "A.B", "factory.<locals>.C", "D"]
    assert declarations[0].lineno == 2
    assert all(d.module == "app.mod" and d.path == "mod.py" for d in declarations)


def test_decorator_arguments_are_evaluated():
    source = """
import sitemap_codegen.annotations
from sitemap_codegen.annotations import ChangeFreq, sitemap_url

@sitemap_codegen.annotations.route("/x")
@sitemap_url(ChangeFreq.YEARLY, priority=-0.5)
@register
class X:
    pass
"""
    route, sitemap, other = inspect_source(source, "app.x")[0].annotations

    assert route.written_name == "sitemap_codegen.annotations.route"
    assert route.name == "sitemap_codegen.annotations.route"
    assert route.args == ("/x",)

    assert sitemap.written_name == "sitemap_url"
    assert sitemap.name == "sitemap_codegen.annotations.sitemap_url"
    assert sitemap.args == (5,)
    assert sitemap.kwargs == (("priority", -0.5),)
    assert sitemap.arity == 2

    assert other.written_name == "register"
    assert other.name is None
    assert other.args == ()


def test_module_level_names_resolve_to_own_module():
    source = """
def sitemap_url(*args):
    return lambda cls: cls

@sitemap_url(1, 0.5)
class X:
    pass
"""
    annotation = inspect_source(source, "app.local")[0].annotations[0]

    assert annotation.name == "app.local.sitemap_url"


def test_non_literal_arguments_mark_annotation_unresolved():
    source = """
from sitemap_codegen.annotations import sitemap_url

@sitemap_url(compute(), **options)
class X:
    pass
"""
    annotation = inspect_source(source, "app.x")[0].annotations[0]

    assert annotation.resolved is False
    assert annotation.name == "sitemap_codegen.annotations.sitemap_url"


def test_subscript_decorator_is_unresolved():
    source = "@registry['pages']\nclass X:\n    pass\n"
    annotation = inspect_source(source)[0].annotations[0]

    assert annotation.written_name == "registry['pages']"
    assert annotation.name is None
    assert annotation.resolved is False


def test_syntax_error_raises_source_parse_error():
    with pytest.raises(SourceParseError):
        inspect_source("class Broken(:\n", path="broken.py")


def test_module_name_for_package(tmp_path):
    package = tmp_path / "app"
    (package / "pages").mkdir(parents=True)
    (package / "__init__.py").write_text("")
    (package / "pages" / "__init__.py").write_text("")

    assert module_name_for(package / "pages" / "home.py", package) == "app.pages.home"
    assert module_name_for(package / "pages" / "__init__.py", package) == "app.pages"
    assert module_name_for(package / "__init__.py", package) == "app"
    assert module_name_for(package / "pages" / "home.py", tmp_path) == "app.pages.home"


def test_iter_source_files_sorted_and_filtered(tmp_path):
    (tmp_path / "b.py").write_text("")
    (tmp_path / "a.py").write_text("")
    (tmp_path / "notes.txt").write_text("")
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "c.py").write_text("")
    (tmp_path / "__pycache__").mkdir()
    (tmp_path / "__pycache__" / "a.cpython.py").write_text("")
    (tmp_path / ".venv").mkdir()
    (tmp_path / ".venv" / "lib.py").write_text("")

    files = iter_source_files([str(tmp_path), str(tmp_path / "a.py")])

    assert [(p.name, module, is_package) for p, module, is_package in files] == [
        ("a.py", "a", False),
        ("b.py", "b", False),
        ("c.py", "sub.c", False),
    ]


def test_iter_source_files_missing_path(tmp_path):
    with pytest.raises(FileNotFoundError):
        iter_source_files([str(tmp_path / "missing")])


def test_only_module_level_imports_are_collected():
    """Imports in functions and classes bind local names only."""
    tree = ast.parse(
        "from sitemap_codegen.annotations import sitemap_url\n"
        "from typing import TYPE_CHECKING\n"
        "if TYPE_CHECKING:\n"
        "    from app.types import Page\n"
        "try:\n"
        "    import ujson as json\n"
        "except ImportError:\n"
        "    import json\n"
        "def helper():\n"
        "    from seo.tools import sitemap_url\n"
        "class View:\n"
        "    from seo import ChangeFreq\n"
    )

    imports = collect_imports(tree)

    assert imports["sitemap_url"] == "sitemap_codegen.annotations.sitemap_url"
    assert imports["Page"] == "app.types.Page"
    assert imports["json"] == "json"
    assert "ChangeFreq" not in imports


def test_package_reexports_resolve_to_annotations_module():
    source = """
import sitemap_codegen
from sitemap_codegen import ChangeFreq, sitemap_url

@sitemap_codegen.route("/x")
@sitemap_url(ChangeFreq.WEEKLY, 0.5)
class X:
    pass
"""
    route, sitemap = inspect_source(source, "app.x")[0].annotations

    assert route.name == "sitemap_codegen.annotations.route"
    assert sitemap.name == "sitemap_codegen.annotations.sitemap_url"
    assert sitemap.args == (3, 0.5)
