"""Jinja2 rendering of error reports."""

from __future__ import annotations

import logging
import threading
from contextvars import ContextVar
from pathlib import Path
from typing import Any

import jinja2

from exterror.config import ConfigError, get_config
from exterror.errors import CONFIG_003, ExtErrorFailure, TemplateCompileError, TemplateRenderError

logger = logging.getLogger(__name__)

# id of a cause -> its rendered report, for the render in progress
_cause_reports: ContextVar[dict[int, str] | None] = ContextVar("exterror_cause_reports", default=None)

DEFAULT_TEMPLATE_SOURCE = (
    "Error in {{ filename }}:{{ line }} ({{ calling_function }}): {{ user_message }}"
    "\n{{ indent }}Error Number: {{ id }}"
    "{% if debug_message %}\n{{ indent }}Debug Message: {{ debug_message }}{% endif %}"
    "{% for key, value in debug_fields.items() %}\n{{ indent }}{{ key }}: {{ value }}{% endfor %}"
    "\n{{ indent }}Trace:"
    "{% for frame in split_lines(stack_trace) %}\n{{ indent_line(trim_left(frame), indent ~ indent) }}{% endfor %}"
    "{% set parent = error_string(cause) %}"
    "{% if parent %}\n{{ indent }}Parent Error:"
    "{% for line in split_lines(parent) %}\n{{ indent_line(line, indent ~ indent) }}{% endfor %}"
    "{% endif %}"
)


def trim_left(text: str) -> str:
    return text.lstrip()


def split_lines(text: str) -> list[str]:
    return text.splitlines()


def indent_line(line: str, prefix: str) -> str:
    return prefix + line


def error_string(cause: object) -> str:
    """Stringify a causing error, returning ``""`` when there is none.

    Inside ``render_error`` the reports of chained causes come from a cache.
    A cause whose own ``__str__`` blows up is shown the way the traceback
    module shows unprintable exceptions. Failures of the facility itself,
    such as broken report templates further down the chain, still propagate.
    """
    if cause is None:
        return ""
    reports = _cause_reports.get()
    if reports is not None and id(cause) in reports:
        return reports[id(cause)]
    try:
        return str(cause)
    except ExtErrorFailure:
        raise
    except Exception:
        return f"<unprintable {type(cause).__name__} object>"


TEMPLATE_FUNCTIONS = {
    "trim_left": trim_left,
    "split_lines": split_lines,
    "indent_line": indent_line,
    "error_string": error_string,
}


def build_environment(**options: Any) -> jinja2.Environment:
    """Create a Jinja2 environment with the report helpers installed.

    Helpers are available both as functions and as filters.
    """
    options.setdefault("undefined", jinja2.StrictUndefined)
    options.setdefault("autoescape", False)
    env = jinja2.Environment(**options)
    env.globals.update(TEMPLATE_FUNCTIONS)
    env.filters.update(TEMPLATE_FUNCTIONS)
    return env


_environment = build_environment()


def compile_template(source: str) -> jinja2.Template:
    try:
        return _environment.from_string(source)
    except jinja2.TemplateSyntaxError as exc:
        raise TemplateCompileError("Invalid template syntax", line=exc.lineno, detail=exc.message) from exc


def load_template(path: Path) -> jinja2.Template:
    try:
        source = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError("Failed to read template file", code=CONFIG_003, path=path) from exc
    try:
        return compile_template(source)
    except TemplateCompileError as exc:
        raise TemplateCompileError(exc.message, path=path, **exc.context) from exc


_default_template: jinja2.Template | None = None
_default_lock = threading.Lock()


def default_template() -> jinja2.Template:
    """Return the shared report template, building it on first use."""
    global _default_template
    if _default_template is None:
        with _default_lock:
            if _default_template is None:
                _default_template = _build_default_template()
    return _default_template


def reset_default_template() -> None:
    global _default_template
    with _default_lock:
        _default_template = None


def _build_default_template() -> jinja2.Template:
    path = get_config().template.path
    if path is None:
        return compile_template(DEFAULT_TEMPLATE_SOURCE)
    logger.debug("Using report template from %s", path)
    return load_template(path)


def template_context(error: Any) -> dict[str, Any]:
    location = error.location
    return {
        "error": error,
        "id": error.id,
        "filename": location.filename,
        "calling_function": location.calling_function,
        "line": location.line,
        "user_message": error.user_message,
        "debug_message": error.debug_message,
        "debug_fields": error.debug_fields,
        "stack_trace": error.stack_trace,
        "cause": error.cause,
        "indent": get_config().template.indent,
    }


def render_error(error: Any, template: jinja2.Template | None = None) -> str:
    """Render ``error`` with ``template``, its own template, or the default.

    Reports of chained ``ExtError`` causes are rendered first, deepest cause
    upwards, and handed to ``error_string`` from a cache, so chain depth is
    not limited by the interpreter's recursion limit. Only the report of the
    direct cause is kept while the next level renders.

    Raises:
        TemplateRenderError: if the template fails to evaluate. There is no
            fallback output.
    """
    chain = _cause_chain(error)
    reports: dict[int, str] = {}
    token = _cause_reports.set(reports)
    try:
        for depth in range(len(chain) - 1, 0, -1):
            reports[id(chain[depth])] = _render_one(chain[depth], None)
            if depth + 1 < len(chain):
                del reports[id(chain[depth + 1])]
        return _render_one(error, template)
    finally:
        _cause_reports.reset(token)


def _cause_chain(error: Any) -> list[Any]:
    from exterror.entity import ExtError

    chain = [error]
    seen = {id(error)}
    cause = error.cause
    while isinstance(cause, ExtError) and id(cause) not in seen:
        chain.append(cause)
        seen.add(id(cause))
        cause = cause.cause
    return chain


def _render_one(error: Any, template: jinja2.Template | None) -> str:
    if template is None:
        template = error.template if error.template is not None else default_template()
    try:
        return template.render(template_context(error))
    except ExtErrorFailure:
        raise
    except Exception as exc:
        raise TemplateRenderError(
            "Template rendering failed",
            template=template.name,
            error_id=error.id,
            detail=str(exc),
        ) from exc
