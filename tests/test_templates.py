"""Tests for tree_catalog.templates."""

import pytest

from tree_catalog.catalog.schemas import CatalogEntry
from tree_catalog.exceptions import StartupError, TemplateNotFoundError, TemplateRenderError
from tree_catalog.templates import TemplateStore, evaluate_expression


class TestEvaluateExpression:
    def test_attribute_lookup(self):
        assert evaluate_expression("context.name", {"name": "Oak"}) == "Oak"

    def test_subscript_lookup(self):
        assert evaluate_expression('context["name"]', {"name": "Oak"}) == "Oak"

    def test_whitespace_is_ignored(self):
        assert evaluate_expression("  context.name ", {"name": "Oak"}) == "Oak"

    def test_nested_lookup(self):
        context = {"entry": {"names": ["Oak", "Elm"]}}
        assert evaluate_expression("context.entry.names[1]", context) == "Elm"

    def test_string_concatenation(self):
        result = evaluate_expression('context.name + " - " + context.title', {"name": "Oak", "title": "Trees"})
        assert result == "Oak - Trees"

    def test_concatenation_stringifies_numbers(self):
        assert evaluate_expression('"count: " + context.n', {"n": 3}) == "count: 3"

    def test_number_addition(self):
        assert evaluate_expression("context.n + 2", {"n": 3}) == "5"

    def test_none_renders_empty(self):
        assert evaluate_expression("context.missing_value", {"missing_value": None}) == ""

    def test_pydantic_model_fields(self):
        entry = CatalogEntry(id="oak", image_path="/oak.jpg", name="Oak", description="Big")
        assert evaluate_expression("context.entry.image_path", {"entry": entry}) == "/oak.jpg"

    def test_pydantic_methods_are_not_fields(self):
        entry = CatalogEntry(id="oak", image_path="/oak.jpg", name="Oak", description="Big")
        with pytest.raises(TemplateRenderError):
            evaluate_expression("context.entry.model_dump", {"entry": entry})

    def test_undefined_field(self):
        with pytest.raises(TemplateRenderError, match="Undefined field"):
            evaluate_expression("context.missing", {"name": "Oak"})

    def test_index_out_of_range(self):
        with pytest.raises(TemplateRenderError):
            evaluate_expression("context.items[5]", {"items": ["a"]})

    @pytest.mark.parametrize(
        "expression",
        [
            "__import__('os').getcwd()",
            "open('config.json')",
            "context.__class__",
            "context._private",
            "other.name",
            "context.name * 3",
            "[1, 2]",
            "context.name if context else ''",
        ],
    )
    def test_rejects_anything_but_lookups_and_concatenation(self, expression):
        with pytest.raises(TemplateRenderError):
            evaluate_expression(expression, {"name": "Oak", "_private": "x"})

    def test_syntax_error(self):
        with pytest.raises(TemplateRenderError, match="Invalid expression"):
            evaluate_expression("context.", {})


class TestTemplateStore:
    def _store(self, tmp_path, **files):
        for name, text in files.items():
            (tmp_path / name).write_text(text)
        store = TemplateStore()
        store.load_all(tmp_path)
        return store

    def test_loads_every_file_by_name(self, tmp_path):
        (tmp_path / "nested").mkdir()
        store = self._store(tmp_path, **{"a.html": "A", "b.txt": "B"})
        assert sorted(store.names()) == ["a.html", "b.txt"]

    def test_render_replaces_markers(self, tmp_path):
        store = self._store(tmp_path, **{"page.html": "<h1><%- context.title %></h1>"})
        assert store.render("page.html", {"title": "Trees"}) == "<h1>Trees</h1>"

    def test_two_markers_on_one_line(self, tmp_path):
        store = self._store(tmp_path, **{"page.html": "<%- context.a %> and <%- context.b %>"})
        assert store.render("page.html", {"a": "X", "b": "Y"}) == "X and Y"

    def test_marker_spanning_lines(self, tmp_path):
        store = self._store(tmp_path, **{"page.html": "<p><%-\n  context.a\n%></p>"})
        assert store.render("page.html", {"a": "X"}) == "<p>X</p>"

    def test_text_without_markers_is_unchanged(self, tmp_path):
        store = self._store(tmp_path, **{"page.html": "<p>100% static</p>"})
        assert store.render("page.html", {}) == "<p>100% static</p>"

    def test_missing_template(self, tmp_path):
        store = self._store(tmp_path)
        with pytest.raises(TemplateNotFoundError):
            store.render("nope.html", {})

    def test_render_fails_on_undefined_field(self, tmp_path):
        store = self._store(tmp_path, **{"page.html": "<%- context.title %> <%- context.nope %>"})
        with pytest.raises(TemplateRenderError):
            store.render("page.html", {"title": "Trees"})

    def test_missing_directory_is_a_startup_error(self, tmp_path):
        with pytest.raises(StartupError):
            TemplateStore().load_all(tmp_path / "missing")
