"""Maven ``pom.xml`` version fetcher."""

from xml.etree import ElementTree

from autotag.exceptions import VersionParseError
from autotag.fetchers.base import VersionFetcher


def _local_name(tag: str) -> str:
    # "{http://maven.apache.org/POM/4.0.0}version" -> "version"
    return tag.rsplit("}", 1)[-1]


class PomXmlFetcher(VersionFetcher):
    """Reads the ``<version>`` element directly under the document root.

    A ``<parent><version>`` is the parent's version, not the project's, and
    is ignored.
    """

    key = "pom.xml"

    def parse_version(self, content: str, path: str) -> str:
        try:
            root = ElementTree.fromstring(content)
        except ElementTree.ParseError as e:
            raise VersionParseError(f"malformed XML: {e}", path=path) from e

        for child in root:
            if isinstance(child.tag, str) and _local_name(child.tag) == "version":
                return child.text or ""

        raise VersionParseError("no <version> element under the document root", path=path)
