from __future__ import annotations

from pathlib import Path

import pytest

from exterror import ExtError, ExtErrorConfig, configure
from exterror.config import ConfigError
from exterror.errors import CONFIG_003, TEMPLATE_001, TemplateCompileError, TemplateRenderError
from exterror.rendering import (
    DEFAULT_TEMPLATE_SOURCE,
    build_environment,
    compile_template,
    default_template,
    error_string,
    indent_line,
    load_template,
    render_error,
    split_lines,
    template_context,
    trim_left,
)


class Unprintable(Exception):
    def __str__(self) -> str:
        raise RuntimeError("cannot print")


def test_trim_left_strips_leading_whitespace_only() -> None:
    assert trim_left("  \tvalue  ") == "value  "


def test_split_lines_has_no_trailing_empty_line() -> None:
    assert split_lines("a\nb\n") == ["a", "b"]
    assert split_lines("") == []


def test_indent_line_prepends_prefix() -> None:
    assert indent_line("value", "-- ") == "-- value"


def test_error_string() -> None:
    assert error_string(None) == ""
    assert error_string(ValueError("boom")) == "boom"
    assert error_string(Unprintable()) == "<unprintable Unprintable object>"


def test_error_string_propagates_broken_templates() -> None:
    err = ExtError(1, "x").with_template("{{ split_lines(line) }}")
    with pytest.raises(TemplateRenderError):
        error_string(err)


def test_helpers_available_as_functions_and_filters() -> None:
    env = build_environment()
    template = env.from_string("{{ trim_left('  a') }}|{{ '  b' | trim_left }}|{{ 'x\ny' | split_lines | length }}")
    assert template.render() == "a|b|2"


def test_compile_template_reports_syntax_errors() -> None:
    with pytest.raises(TemplateCompileError) as exc_info:
        compile_template("{{ id ")
    assert exc_info.value.code == TEMPLATE_001
    assert exc_info.value.context["line"] == 1


def test_default_template_is_shared() -> None:
    assert default_template() is default_template()


def test_configure_rebuilds_default_template() -> None:
    before = default_template()
    configure(ExtErrorConfig())
    assert default_template() is not before


def test_default_template_from_configured_file(tmp_path: Path) -> None:
    template_path = tmp_path / "report.j2"
    template_path.write_text("{{ id }}|{{ user_message }}", encoding="utf-8")
    configure(ExtErrorConfig(template={"path": template_path}))
    assert ExtError(5, "from file").render() == "5|from file"


def test_missing_default_template_file_raises(tmp_path: Path) -> None:
    configure(ExtErrorConfig(template={"path": tmp_path / "missing.j2"}))
    with pytest.raises(ConfigError) as exc_info:
        ExtError(5, "x").render()
    assert exc_info.value.code == CONFIG_003


def test_load_template_reports_path_on_syntax_error(tmp_path: Path) -> None:
    template_path = tmp_path / "broken.j2"
    template_path.write_text("{% if %}", encoding="utf-8")
    with pytest.raises(TemplateCompileError) as exc_info:
        load_template(template_path)
    assert str(template_path) in str(exc_info.value)


def test_configured_indent_is_used() -> None:
    configure(ExtErrorConfig(template={"indent": "\t"}))
    lines = ExtError(1, "tabbed", ValueError("inner")).render().splitlines()
    assert lines[1] == "\tError Number: 1"
    assert lines[-1] == "\t\tinner"


def test_render_error_with_explicit_template() -> None:
    err = ExtError(8, "explicit").with_template("{{ id }}")
    assert render_error(err, compile_template("{{ user_message }}!")) == "explicit!"
    assert render_error(err) == "8"


def test_template_context_exposes_error_fields() -> None:
    cause = ValueError("inner")
    err = ExtError(8, "ctx", cause).with_debug_message("dbg").with_debug_field("k", "v")
    context = template_context(err)
    assert context["error"] is err
    assert context["cause"] is cause
    assert context["debug_fields"] == {"k": "v"}
    assert context["filename"] == "test_rendering.py"
    assert context["indent"] == "    "
    assert context["stack_trace"] == err.stack_trace


def test_default_template_source_sections_in_order() -> None:
    markers = ["Error in", "Error Number:", "Debug Message:", "Trace:", "Parent Error:"]
    positions = [DEFAULT_TEMPLATE_SOURCE.index(marker) for marker in markers]
    assert positions == sorted(positions)


def test_nested_broken_default_template_stays_fatal(tmp_path: Path) -> None:
    template_path = tmp_path / "broken.j2"
    template_path.write_text("{% if %}", encoding="utf-8")
    configure(ExtErrorConfig(template={"path": template_path}))
    child = ExtError(2, "child", ExtError(1, "parent")).with_template("{{ user_message }} <- {{ error_string(cause) }}")
    with pytest.raises(TemplateCompileError):
        child.render()


def test_nested_missing_default_template_stays_fatal(tmp_path: Path) -> None:
    configure(ExtErrorConfig(template={"path": tmp_path / "missing.j2"}))
    parent = ExtError(1, "parent")
    child = ExtError(2, "child", parent).with_template("{{ user_message }} <- {{ error_string(cause) }}")
    with pytest.raises(ConfigError) as exc_info:
        child.render()
    assert exc_info.value.code == CONFIG_003
    with pytest.raises(ConfigError):
        error_string(parent)
