"""SCSS stylesheet compiler (requires ``pip install perch[sass]``).

Registered by default for ``.scss`` requests: the source is compiled with
libsass and served as CSS. ``@import`` resolves relative to the source
file's directory.
"""

from typing import Any

from perch.compilers import CompileContext, Compiled
from perch.errors import CompileError, ConfigurationError

SCSS_PATTERN = r"\.scss$"
CSS_CONTENT_TYPE = "text/css; charset=utf-8"


def _get_sass() -> Any:
    """Import libsass or raise a clear error."""
    try:
        import sass
    except ImportError as exc:
        msg = (
            "Compiling .scss files requires 'libsass'. "
            "Install it with: pip install perch[sass]"
        )
        raise ConfigurationError(msg) from exc
    return sass


def compile_scss(source: bytes, context: CompileContext) -> Compiled:
    """Compile SCSS *source* to CSS."""
    sass = _get_sass()
    try:
        css = sass.compile(
            string=source.decode("utf-8"),
            include_paths=[str(context.directory)],
            output_style="expanded",
        )
    except sass.CompileError as exc:
        raise CompileError(f"{context.path}: {exc}") from exc
    return Compiled(body=css, content_type=CSS_CONTENT_TYPE)


DEFAULT_COMPILERS = ((SCSS_PATTERN, compile_scss),)
