"""Tests for autotag/engine/orchestrator.py."""

import pytest

from autotag.config.settings import TaggerSettings
from autotag.engine.orchestrator import FetchOrchestrator
from autotag.enums import ErrorKind
from autotag.exceptions import NoSupportedFormatError, TemplateError, VersionFetchError
from autotag.providers.static import StaticContentProvider
from autotag.rendering.engine import STAGE_EXECUTION, STAGE_SYNTAX

REPO = "octo/app"


def pom(version: str) -> str:
    return f"<project><version>{version}</version></project>"


def explicit(path: str = "contests/pom.xml", template: str = "v{{.version}}", regex: str = "") -> TaggerSettings:
    return TaggerSettings(path=path, behavior="after", template=template, regex=regex)


@pytest.fixture
def orchestrator(registry):
    return FetchOrchestrator(registry)


class TestExplicitMode:
    """Tests for fetching with an explicit manifest path."""

    @pytest.mark.asyncio
    async def test_version_changed(self, orchestrator):
        """A version bump should render the tag caption."""
        old = StaticContentProvider({"contests/pom.xml": pom("1.0.0")})
        new = StaticContentProvider({"contests/pom.xml": pom("1.1.0")})

        outcome = await orchestrator.fetch(explicit(), old, new, REPO)

        assert outcome.changed
        assert outcome.caption == "v1.1.0"
        assert outcome.old_version == "1.0.0"
        assert outcome.new_version == "1.1.0"
        assert outcome.source_path == "contests/pom.xml"

    @pytest.mark.asyncio
    async def test_version_unchanged(self, orchestrator):
        """Equal versions should produce no caption."""
        old = StaticContentProvider({"contests/pom.xml": pom("1.0.0")})
        new = StaticContentProvider({"contests/pom.xml": pom("1.0.0")})

        outcome = await orchestrator.fetch(explicit(), old, new, REPO)

        assert not outcome.changed
        assert outcome.caption == ""
        assert outcome.new_version == "1.0.0"

    @pytest.mark.asyncio
    async def test_old_manifest_missing_is_tolerated(self, orchestrator):
        """A manifest added by the push should count as a version change."""
        old = StaticContentProvider({})
        new = StaticContentProvider({"contests/pom.xml": pom("0.1.0")})

        outcome = await orchestrator.fetch(explicit(), old, new, REPO)

        assert outcome.old_version == ""
        assert outcome.caption == "v0.1.0"

    @pytest.mark.asyncio
    async def test_new_manifest_missing_fails(self, orchestrator):
        """A manifest missing at the new reference should abort."""
        old = StaticContentProvider({"contests/pom.xml": pom("1.0.0")})
        new = StaticContentProvider({})

        with pytest.raises(VersionFetchError) as exc_info:
            await orchestrator.fetch(explicit(), old, new, REPO)

        assert exc_info.value.kind == ErrorKind.NOT_FOUND
        assert str(exc_info.value).startswith('get new version error for "octo/app"')

    @pytest.mark.asyncio
    async def test_old_manifest_unparseable_fails(self, orchestrator):
        """A broken manifest at the old reference should abort."""
        old = StaticContentProvider({"contests/pom.xml": "<project>"})
        new = StaticContentProvider({"contests/pom.xml": pom("1.1.0")})

        with pytest.raises(VersionFetchError) as exc_info:
            await orchestrator.fetch(explicit(), old, new, REPO)

        assert exc_info.value.kind == ErrorKind.PARSE
        assert str(exc_info.value).startswith('get prev version error for "octo/app"')

    @pytest.mark.asyncio
    async def test_old_side_read_before_new_side(self, orchestrator):
        """The old reference should be read before the new one."""
        calls = []
        old = StaticContentProvider({"pom.xml": pom("1.0.0")})
        new = StaticContentProvider({"pom.xml": pom("1.0.1")})
        old.get_file_content = _recording(calls, "old", old.get_file_content)
        new.get_file_content = _recording(calls, "new", new.get_file_content)

        await orchestrator.fetch(explicit(path="pom.xml"), old, new, REPO)

        assert calls == ["old", "new"]

    @pytest.mark.asyncio
    async def test_unregistered_path_uses_regex(self, orchestrator):
        """Unknown manifests should be read with the configured regex."""
        settings = explicit(path="VERSION.txt", regex=r"release: (\S+)")
        old = StaticContentProvider({"VERSION.txt": "release: 2.0.0\n"})
        new = StaticContentProvider({"VERSION.txt": "release: 2.1.0\n"})

        outcome = await orchestrator.fetch(settings, old, new, REPO)

        assert outcome.caption == "v2.1.0"

    @pytest.mark.asyncio
    async def test_invalid_regex_fails_dispatch(self, orchestrator):
        """An invalid fallback regex should be reported as a fetch error."""
        settings = explicit(path="VERSION.txt", regex="(")

        with pytest.raises(VersionFetchError, match="cannot select version fetcher") as exc_info:
            await orchestrator.fetch(settings, StaticContentProvider(), StaticContentProvider(), REPO)

        assert exc_info.value.kind == ErrorKind.CONFIG_INVALID

    @pytest.mark.asyncio
    async def test_default_template_when_empty(self, orchestrator):
        """An empty template should fall back to v{{.Version}}."""
        old = StaticContentProvider({"pom.xml": pom("1.0.0")})
        new = StaticContentProvider({"pom.xml": pom("1.0.1")})

        outcome = await orchestrator.fetch(TaggerSettings(path="pom.xml"), old, new, REPO)

        assert outcome.caption == "v1.0.1"


class TestAutoDetectMode:
    """Tests for fetching without a manifest path."""

    @pytest.mark.asyncio
    async def test_first_readable_manifest_wins(self, orchestrator):
        """The first candidate in sorted order that reads should be used."""
        files_old = {"package.json": '{"version": "1.0.0"}', "pom.xml": pom("5.0.0")}
        files_new = {"package.json": '{"version": "1.1.0"}', "pom.xml": pom("5.0.0")}

        outcome = await orchestrator.fetch(
            TaggerSettings(), StaticContentProvider(files_old), StaticContentProvider(files_new), REPO
        )

        assert outcome.source_path == "package.json"
        assert outcome.caption == "v1.1.0"

    @pytest.mark.asyncio
    async def test_same_inputs_same_choice(self, orchestrator):
        """Repeated runs should select the same manifest."""
        files = {"pubspec.yaml": "version: 1.0.0\n", "gradle.properties": "version=2.0.0\n"}

        results = [
            await orchestrator.fetch(TaggerSettings(), StaticContentProvider({}), StaticContentProvider(files), REPO)
            for _ in range(3)
        ]

        assert {r.source_path for r in results} == {"gradle.properties"}

    @pytest.mark.asyncio
    async def test_new_side_failure_skips_candidate(self, orchestrator):
        """A candidate that cannot be read at the new reference should be skipped."""
        old = StaticContentProvider({"build.gradle": "version = '1.0.0'\n"})
        new = StaticContentProvider({"build.gradle": "version = computed()\n", "pom.xml": pom("3.0.0")})

        outcome = await orchestrator.fetch(TaggerSettings(), old, new, REPO)

        assert outcome.source_path == "pom.xml"
        assert outcome.old_version == ""
        assert outcome.caption == "v3.0.0"

    @pytest.mark.asyncio
    async def test_old_side_parse_failure_skips_candidate(self, orchestrator):
        """A candidate broken at the old reference should be skipped."""
        old = StaticContentProvider({"package.json": "{broken", "pom.xml": pom("1.0.0")})
        new = StaticContentProvider({"package.json": '{"version": "9.9.9"}', "pom.xml": pom("1.0.1")})

        outcome = await orchestrator.fetch(TaggerSettings(), old, new, REPO)

        assert outcome.source_path == "pom.xml"
        assert outcome.caption == "v1.0.1"

    @pytest.mark.asyncio
    async def test_npmrc_not_tried(self, orchestrator):
        """.npmrc should not be used for auto-detection."""
        new = StaticContentProvider({".npmrc": "version=1.0.0\n"})

        with pytest.raises(NoSupportedFormatError):
            await orchestrator.fetch(TaggerSettings(), StaticContentProvider(), new, REPO)

        assert ".npmrc" not in new.requests

    @pytest.mark.asyncio
    async def test_no_supported_format(self, orchestrator):
        """Running out of candidates should raise NoSupportedFormatError."""
        new = StaticContentProvider({"README.md": "# app"})

        with pytest.raises(NoSupportedFormatError) as exc_info:
            await orchestrator.fetch(TaggerSettings(), StaticContentProvider(), new, REPO)

        assert exc_info.value.kind == ErrorKind.NO_SUPPORTED_FORMAT
        assert "pom.xml" in str(exc_info.value)
        assert new.requests == ["build.gradle", "gradle.properties", "package.json", "pom.xml", "pubspec.yaml"]

    @pytest.mark.asyncio
    async def test_unchanged_in_auto_mode(self, orchestrator):
        """Equal versions should produce no caption."""
        files = {"pom.xml": pom("1.0.0")}

        outcome = await orchestrator.fetch(
            TaggerSettings(), StaticContentProvider(files), StaticContentProvider(files), REPO
        )

        assert not outcome.changed
        assert outcome.source_path == "pom.xml"


class TestCaptionErrors:
    """Tests for template failures during fetch."""

    @pytest.mark.asyncio
    async def test_template_syntax_error(self, orchestrator):
        """A template that cannot compile should raise a syntax TemplateError."""
        old = StaticContentProvider({"pom.xml": pom("1.0.0")})
        new = StaticContentProvider({"pom.xml": pom("1.1.0")})

        with pytest.raises(TemplateError) as exc_info:
            await orchestrator.fetch(explicit(path="pom.xml", template="v{{.Version"), old, new, REPO)

        assert exc_info.value.stage == STAGE_SYNTAX
        assert exc_info.value.kind == ErrorKind.TEMPLATE

    @pytest.mark.asyncio
    async def test_template_execution_error(self, orchestrator):
        """A template referencing unknown fields should raise an execution TemplateError."""
        old = StaticContentProvider({"pom.xml": pom("1.0.0")})
        new = StaticContentProvider({"pom.xml": pom("1.1.0")})

        with pytest.raises(TemplateError) as exc_info:
            await orchestrator.fetch(explicit(path="pom.xml", template="v{{.Version}}-{{.Build}}"), old, new, REPO)

        assert exc_info.value.stage == STAGE_EXECUTION

    @pytest.mark.asyncio
    async def test_template_not_rendered_when_unchanged(self, orchestrator):
        """A broken template should not matter when nothing changed."""
        files = {"pom.xml": pom("1.0.0")}

        outcome = await orchestrator.fetch(
            explicit(path="pom.xml", template="v{{.Version"),
            StaticContentProvider(files),
            StaticContentProvider(files),
            REPO,
        )

        assert not outcome.changed


def _recording(calls, label, func):
    async def _wrapped(path):
        calls.append(label)
        return await func(path)

    return _wrapped
