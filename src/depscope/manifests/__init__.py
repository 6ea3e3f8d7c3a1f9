"""Manifest parsers, selected by file name."""

from pathlib import PurePath

from depscope.errors import UnsupportedFileTypeError
from depscope.manifests.base import (
    ManifestContent,
    ManifestParser,
    package_from_requirement,
    parse_requirement_entry,
    pinned_version,
)
from depscope.manifests.package_json import PackageJsonParser
from depscope.manifests.pipfile import PipfileParser
from depscope.manifests.requirements import RequirementsParser
from depscope.models import Package

# Keyword in the lower-cased file stem → parser. First match wins.
PARSERS: dict[str, type[ManifestParser]] = {
    "requirements": RequirementsParser,
    "pipfile": PipfileParser,
    "package": PackageJsonParser,
}


def get_parser(filename: str) -> ManifestParser:
    """Return a parser for ``filename`` or raise :class:`UnsupportedFileTypeError`."""
    stem = PurePath(filename).name.lower().rsplit(".", 1)[0]
    for keyword, parser_cls in PARSERS.items():
        if keyword in stem:
            return parser_cls()
    raise UnsupportedFileTypeError(filename)


def parse_manifest(filename: str, content: ManifestContent) -> list[Package]:
    """Parse a manifest into its declared packages, in file order."""
    return get_parser(filename).parse(filename, content)


__all__ = [
    "PARSERS",
    "ManifestContent",
    "ManifestParser",
    "PackageJsonParser",
    "PipfileParser",
    "RequirementsParser",
    "get_parser",
    "package_from_requirement",
    "parse_manifest",
    "parse_requirement_entry",
    "pinned_version",
]
