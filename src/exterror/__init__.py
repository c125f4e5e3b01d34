"""exterror public API surface."""

from exterror.caller import CallerLocation, locate_caller
from exterror.config import (
    ConfigError,
    ExtErrorConfig,
    configure,
    get_config,
    load_config,
)
from exterror.entity import ExtError
from exterror.errors import (
    ExtErrorFailure,
    TemplateCompileError,
    TemplateError,
    TemplateRenderError,
)
from exterror.rendering import (
    DEFAULT_TEMPLATE_SOURCE,
    build_environment,
    compile_template,
    default_template,
    render_error,
)
from exterror.stack import STACK_BUFFER_SIZE, capture_stack

__all__ = [
    "ExtError",
    "CallerLocation",
    "locate_caller",
    "STACK_BUFFER_SIZE",
    "capture_stack",
    "DEFAULT_TEMPLATE_SOURCE",
    "build_environment",
    "compile_template",
    "default_template",
    "render_error",
    "ConfigError",
    "ExtErrorConfig",
    "configure",
    "get_config",
    "load_config",
    "ExtErrorFailure",
    "TemplateCompileError",
    "TemplateError",
    "TemplateRenderError",
    "__version__",
]

__version__ = "0.1.0"
