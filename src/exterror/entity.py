"""The augmented error type."""

from __future__ import annotations

import logging
from typing import Any

import jinja2

from exterror.caller import CallerLocation, constructor_caller, location_of
from exterror.config import get_config
from exterror.rendering import compile_template, render_error
from exterror.stack import capture_stack


class ExtError(Exception):
    """An exception carrying diagnostic context for a human-readable report.

    The location and stack of the code constructing the error are captured once,
    at construction. Extra context is attached with the ``with_*`` methods,
    which mutate the error and return it so calls can be chained::

        raise ExtError(4012, "Could not save invoice", exc).with_debug_field("invoice_id", 17)

    ``str()`` renders the full report, including the report of the causing
    error. Instances are not safe to enrich from several threads at once.

    Args:
        id: Diagnostic code. Not validated.
        user_message: Short description for end users.
        cause: The error this one wraps, if any.
    """

    def __init__(self, id: int, user_message: str, cause: BaseException | None = None) -> None:
        super().__init__(user_message)
        config = get_config()
        frame = constructor_caller(self)
        self.id = id
        self.user_message = user_message
        self.debug_message = ""
        self.debug_fields: dict[str, Any] = {}
        self.cause = cause
        self.location: CallerLocation = location_of(frame)
        self.stack_trace = capture_stack(frame, limit=config.stack.buffer_size) if frame is not None else ""
        self.template: jinja2.Template | None = None
        if isinstance(cause, BaseException):
            self.__cause__ = cause
        del frame
        if config.logging.log_on_create:
            self.log_and_return()

    def with_debug_field(self, key: str, value: Any) -> ExtError:
        self.debug_fields[key] = value
        return self

    def with_debug_message(self, message: str) -> ExtError:
        self.debug_message = message
        return self

    def with_template(self, template: jinja2.Template | str) -> ExtError:
        """Render this error with ``template`` instead of the shared default.

        Template source strings are compiled with the report helpers available.
        """
        if isinstance(template, str):
            template = compile_template(template)
        self.template = template
        return self

    def log_and_return(self, logger: logging.Logger | None = None, level: int | None = None) -> ExtError:
        settings = get_config().logging
        if logger is None:
            logger = logging.getLogger(settings.logger_name)
        if level is None:
            level = settings.level_number
        if logger.isEnabledFor(level):
            # template failures must reach the caller, not a logging handler
            logger.log(level, "%s", self.render())
        return self

    def unwrap(self) -> BaseException | None:
        return self.cause

    def render(self) -> str:
        return render_error(self)

    def __str__(self) -> str:
        return self.render()

    def __reduce__(self) -> tuple[Any, ...]:
        # rebuilt from state: location and stack stay those of the original
        return (_restore, (type(self), dict(self.__dict__)))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r}, user_message={self.user_message!r})"


def _restore(cls: type[ExtError], state: dict[str, Any]) -> ExtError:
    error = cls.__new__(cls)
    error.args = (state.get("user_message", ""),)
    error.__dict__.update(state)
    if isinstance(error.cause, BaseException):
        error.__cause__ = error.cause
    return error
