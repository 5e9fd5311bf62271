"""Tests for autotag/rendering/engine.py."""

from datetime import UTC, datetime

import pytest

from autotag.exceptions import TemplateError
from autotag.rendering.engine import STAGE_EXECUTION, STAGE_SYNTAX, CaptionRenderer, translate_go_fields


class TestTranslateGoFields:
    """Tests for Go field syntax translation."""

    @pytest.mark.parametrize(
        "template,expected",
        [
            ("v{{.Version}}", "v{{Version}}"),
            ("v{{ .version }}", "v{{ version }}"),
            ("{{- .Version -}}", "{{- Version -}}"),
            ("v{{ version }}", "v{{ version }}"),
            ("release-1.0", "release-1.0"),
        ],
    )
    def test_translation(self, template, expected):
        """Leading-dot fields inside expressions should lose the dot."""
        assert translate_go_fields(template) == expected

    def test_method_calls_untouched(self):
        """Attribute access after a call should be kept."""
        template = '{{ Time().strftime("%Y") }}'

        assert translate_go_fields(template) == template

    def test_text_outside_expressions_untouched(self):
        """Dots in literal text should be kept."""
        assert translate_go_fields("v.{{.Version}}.final") == "v.{{Version}}.final"

    @pytest.mark.parametrize(
        "template",
        ['{{ version ~ ".rc" }}', "{{ version ~ '.rc' }}", '{{ "a.b" ~ .Version }}'],
    )
    def test_string_literals_untouched(self, template):
        """Dots inside quoted strings should be kept."""
        expected = template.replace("~ .Version", "~ Version")

        assert translate_go_fields(template) == expected

    @pytest.mark.parametrize(
        "template,expected",
        [
            ("{{Time}}", "{{Time()}}"),
            ("{{ now }}", "{{ now() }}"),
            ("{{ Time.year }}", "{{ Time().year }}"),
            ("{{ Time() }}", "{{ Time() }}"),
            ("{{ Timeout }}", "{{ Timeout }}"),
            ('{{ "Time" }}', '{{ "Time" }}'),
        ],
    )
    def test_bare_time_becomes_call(self, template, expected):
        """A bare Time or now should be rewritten to a call."""
        assert translate_go_fields(template) == expected


class TestCaptionRenderer:
    """Tests for CaptionRenderer."""

    @pytest.fixture
    def renderer(self):
        return CaptionRenderer()

    @pytest.mark.parametrize(
        "template",
        ["v{{.Version}}", "v{{.version}}", "v{{ version }}", "v{{ Version }}"],
    )
    def test_render_version(self, renderer, template):
        """All placeholder spellings should render the version."""
        assert renderer.render(template, "1.1.0") == "v1.1.0"

    def test_render_strips_whitespace(self, renderer):
        """Surrounding whitespace should be stripped from captions."""
        assert renderer.render("  v{{.Version}}\n", "2.0.0") == "v2.0.0"

    def test_render_with_time(self, renderer):
        """Time() should expose the current UTC datetime."""
        caption = renderer.render('v{{ version }}-{{ Time().strftime("%Y") }}', "1.0.0")

        assert caption == f"v1.0.0-{datetime.now(UTC).year}"

    def test_render_with_bare_time(self, renderer):
        """Go-style {{Time}} should render the timestamp, not the function."""
        caption = renderer.render("v{{.Version}}-{{Time}}", "1.1.0")

        assert caption.startswith(f"v1.1.0-{datetime.now(UTC).year}")
        assert "function" not in caption

    def test_render_keeps_dots_in_strings(self, renderer):
        """Concatenated string literals should keep their dots."""
        assert renderer.render('{{ version ~ ".rc" }}', "1.1.0") == "1.1.0.rc"

    def test_callable_result_is_execution_error(self, renderer):
        """An uncalled method should not end up in the caption."""
        with pytest.raises(TemplateError, match="callable") as exc_info:
            renderer.render("v{{ version.upper }}", "1.1.0")

        assert exc_info.value.stage == STAGE_EXECUTION

    def test_render_with_filter(self, renderer):
        """Standard Jinja2 filters should be available."""
        assert renderer.render("{{ version | replace('.', '_') }}", "1.2.3") == "1_2_3"

    def test_syntax_error(self, renderer):
        """Unparseable templates should raise a syntax-stage error."""
        with pytest.raises(TemplateError) as exc_info:
            renderer.render("v{{ version ", "1.0.0", repository="octo/app")

        assert exc_info.value.stage == STAGE_SYNTAX
        assert exc_info.value.repository == "octo/app"

    def test_undefined_variable(self, renderer):
        """Unknown variables should raise an execution-stage error."""
        with pytest.raises(TemplateError) as exc_info:
            renderer.render("v{{ .Build }}", "1.0.0")

        assert exc_info.value.stage == STAGE_EXECUTION

    def test_empty_caption(self, renderer):
        """A template rendering to nothing should be an execution error."""
        with pytest.raises(TemplateError, match="empty tag name") as exc_info:
            renderer.render("{% if false %}{{ version }}{% endif %}", "1.0.0")

        assert exc_info.value.stage == STAGE_EXECUTION

    def test_sandbox_blocks_unsafe_access(self, renderer):
        """Sandboxed templates should not reach Python internals."""
        with pytest.raises(TemplateError) as exc_info:
            renderer.render("{{ version.__class__.__mro__ }}", "1.0.0")

        assert exc_info.value.stage == STAGE_EXECUTION
