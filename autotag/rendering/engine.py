"""Sandboxed Jinja2 rendering of tag captions.

Captions are rendered from the ``template`` setting of ``.atc.yaml``. The
setting historically used Go template field syntax (``v{{.Version}}``), so
dotted field references inside ``{{ }}`` are rewritten to plain Jinja2
variables before compiling, and a bare ``{{Time}}`` becomes ``{{Time()}}``.
Text inside string literals is left alone. Both spellings work::

    v{{.Version}}          -> v1.2.0
    v{{ version }}-{{ Time().strftime("%Y%m%d") }}  -> v1.2.0-20240115

Security Features:
    - Sandboxed environment prevents arbitrary code execution
    - StrictUndefined turns unknown variables into execution errors

Key Exports:
    CaptionRenderer: Compiles and renders caption templates.
"""

import re
from datetime import UTC, datetime
from typing import Any, cast

from jinja2 import StrictUndefined, TemplateSyntaxError, Undefined
from jinja2.exceptions import SecurityError
from jinja2.exceptions import TemplateError as JinjaTemplateError
from jinja2.sandbox import SandboxedEnvironment

from autotag.exceptions import TemplateError

_EXPRESSION_RE = re.compile(r"\{\{(.*?)\}\}", re.DOTALL)
# Scanned left to right inside one expression. String literals are matched
# first and kept as they are.
#   field: ".Version" at the start or after whitespace/operators, not "a.b"
#   func:  a bare "Time" or "now" that is not already called
_GO_TOKEN_RE = re.compile(
    r"""(?P<string>"(?:\\.|[^"\\])*"|'(?:\\.|[^'\\])*')"""
    r"""|(?<![\w)\]\.'"])\.(?P<field>[A-Za-z_]\w*)"""
    r"""|(?<![\w.'"])(?P<func>Time|now)\b(?!\s*\()"""
)

STAGE_SYNTAX = "syntax"
STAGE_EXECUTION = "execution"


def _now() -> datetime:
    return datetime.now(UTC)


def _finalize(value: Any) -> Any:
    if callable(value) and not isinstance(value, Undefined):
        raise TypeError(f"expression evaluated to a callable ({type(value).__name__}), call it instead")
    return value


def _rewrite_token(match: re.Match[str]) -> str:
    if match.lastgroup == "field":
        return match.group("field")
    if match.lastgroup == "func":
        return match.group("func") + "()"
    return match.group(0)


def translate_go_fields(template: str) -> str:
    """Rewrite Go-style ``{{.Field}}`` and ``{{Time}}`` to Jinja2 form."""

    def _rewrite(match: re.Match[str]) -> str:
        return "{{" + _GO_TOKEN_RE.sub(_rewrite_token, match.group(1)) + "}}"

    return _EXPRESSION_RE.sub(_rewrite, template)


class CaptionRenderer:
    """Renders tag captions from string templates.

    Context variables:
        version / Version: the new version string

    Globals:
        Time() / now(): current UTC ``datetime``

    Example:
        >>> CaptionRenderer().render("v{{.Version}}", "1.1.0")
        'v1.1.0'
    """

    def __init__(self) -> None:
        self.env = SandboxedEnvironment(
            undefined=StrictUndefined,
            autoescape=False,
            keep_trailing_newline=False,
            finalize=_finalize,
        )
        self.env.globals.update({"Time": _now, "now": _now})

    def render(self, template: str, version: str, repository: str | None = None) -> str:
        """Render ``template`` with ``version``.

        Raises:
            TemplateError: stage "syntax" if the template cannot be compiled,
                stage "execution" if rendering fails or yields an empty caption
        """
        try:
            compiled = self.env.from_string(translate_go_fields(template))
        except TemplateSyntaxError as e:
            raise TemplateError(
                f"error in caption template syntax: {e.message}",
                stage=STAGE_SYNTAX,
                repository=repository,
            ) from e

        context: dict[str, Any] = {"version": version, "Version": version}
        try:
            caption = cast(str, compiled.render(**context)).strip()
        except (JinjaTemplateError, SecurityError, TypeError, ValueError, AttributeError) as e:
            raise TemplateError(
                f"error executing caption template: {e}",
                stage=STAGE_EXECUTION,
                repository=repository,
            ) from e

        if not caption:
            raise TemplateError(
                "caption template rendered an empty tag name",
                stage=STAGE_EXECUTION,
                repository=repository,
            )
        return caption
