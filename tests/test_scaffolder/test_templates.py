"""Unit tests for TemplateRenderer (hyperdb_helper.scaffolder.templates)."""

from __future__ import annotations

from pathlib import Path, PurePosixPath, PureWindowsPath

import pytest
from jinja2 import UndefinedError

from hyperdb_helper.scaffolder.templates import (
    TemplateRenderer,
    _js_import_path_filter,
)


@pytest.fixture
def renderer() -> TemplateRenderer:
    return TemplateRenderer()


class TestBundledTemplates:
    @pytest.mark.unit
    def test_list_templates(self, renderer: TemplateRenderer):
        assert renderer.list_templates() == [
            "basic/config.js.j2",
            "basic/functions.js.j2",
            "basic/schema.js.j2",
            "examples/functions.js.j2",
            "examples/index.js.j2",
            "examples/schema.js.j2",
        ]

    @pytest.mark.unit
    def test_list_templates_with_prefix(self, renderer: TemplateRenderer):
        assert renderer.list_templates("basic") == [
            "basic/config.js.j2",
            "basic/functions.js.j2",
            "basic/schema.js.j2",
        ]

    @pytest.mark.unit
    def test_list_templates_unknown_prefix(self, renderer: TemplateRenderer):
        assert renderer.list_templates("nope") == []

    @pytest.mark.unit
    def test_basic_schema_uses_namespace(self, renderer: TemplateRenderer):
        content = renderer.render("basic/schema.js.j2", {"schema_namespace": "blog"})
        assert "export function createSchema (hyperschema)" in content
        assert "export function createDatabase (hyperdb)" in content
        assert "hyperschema.namespace('blog')" in content
        assert "hyperdb.namespace('blog')" in content

    @pytest.mark.unit
    def test_missing_variable_raises(self, renderer: TemplateRenderer):
        with pytest.raises(UndefinedError):
            renderer.render("basic/schema.js.j2", {})

    @pytest.mark.unit
    @pytest.mark.parametrize("template", ["basic/schema.js.j2", "examples/schema.js.j2"])
    def test_missing_schema_namespace_raises(self, renderer: TemplateRenderer, template: str):
        context = {"post_fields": [], "author_fields": [], "indexes": []}
        with pytest.raises(UndefinedError, match="schema_namespace"):
            renderer.render(template, context)

    @pytest.mark.unit
    def test_trailing_newline_kept(self, renderer: TemplateRenderer):
        content = renderer.render("basic/config.js.j2", {})
        assert content.endswith("}\n")


class TestCustomTemplateDir:
    @pytest.mark.unit
    async def test_render_to_file_creates_parents(self, tmp_path: Path):
        templates = tmp_path / "templates"
        templates.mkdir()
        (templates / "hello.txt.j2").write_text("hello {{ name }}\n", encoding="utf-8")
        renderer = TemplateRenderer(templates)

        out = await renderer.render_to_file("hello.txt.j2", tmp_path / "out" / "hello.txt", {"name": "db"})

        assert out == tmp_path / "out" / "hello.txt"
        assert out.read_text(encoding="utf-8") == "hello db\n"

    @pytest.mark.unit
    def test_only_js_import_path_filter_added(self, tmp_path: Path):
        (tmp_path / "f.j2").write_text("{{ p | js_import_path }}", encoding="utf-8")
        renderer = TemplateRenderer(tmp_path)
        assert renderer.render("f.j2", {"p": "a/b.js"}) == "./a/b.js"
        assert "posix" not in renderer.env.filters


class TestFilters:
    @pytest.mark.unit
    def test_js_import_path_from_windows_path(self):
        assert _js_import_path_filter(PureWindowsPath("database\\generated\\index.js")) == "./database/generated/index.js"

    @pytest.mark.unit
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("database/generated/database/index.js", "./database/generated/database/index.js"),
            ("./index.js", "./index.js"),
            ("../shared/index.js", "../shared/index.js"),
            ("/abs/index.js", "/abs/index.js"),
            (PurePosixPath("gen/index.js"), "./gen/index.js"),
        ],
    )
    def test_js_import_path(self, value, expected: str):
        assert _js_import_path_filter(value) == expected
