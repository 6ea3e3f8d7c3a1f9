"""Common manifest-parser plumbing."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Union

from packaging.requirements import InvalidRequirement, Requirement
from packaging.utils import canonicalize_name

from depscope.errors import FileProcessingError
from depscope.models import LATEST_VERSION, Ecosystem, Package

logger = logging.getLogger(__name__)

ManifestContent = Union[str, bytes]


class ManifestParser(ABC):
    """Turns the text of one manifest format into declared packages.

    ``parse`` is a template method: decode, ``parse_raw`` the text into a
    format-specific structure, then ``parse_entries`` that structure. Any
    failure is reported as a single :class:`FileProcessingError`.
    """

    ecosystem: Ecosystem

    def parse(self, filename: str, content: ManifestContent) -> list[Package]:
        try:
            text = _decode(content)
            raw = self.parse_raw(text)
            return self.parse_entries(raw)
        except FileProcessingError:
            raise
        except Exception as e:
            raise FileProcessingError(f"Failed to process file {filename}: {e}") from e

    @abstractmethod
    def parse_raw(self, text: str) -> Any:
        """Parse file text into a format-specific structure."""

    @abstractmethod
    def parse_entries(self, raw: Any) -> list[Package]:
        """Convert the parsed structure into packages, in file order."""


def _decode(content: ManifestContent) -> str:
    if isinstance(content, bytes):
        try:
            return content.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise FileProcessingError(f"File content is not text: {e}") from e
    return content


# ── PEP 508 requirement entries ───────────────────────────────────────────

def pinned_version(requirement: Requirement) -> str:
    """Exact version pinned by ``==``/``===``, else :data:`LATEST_VERSION`."""
    for spec in requirement.specifier:
        if spec.operator in ("==", "===") and "*" not in spec.version:
            return spec.version
    return LATEST_VERSION


def package_from_requirement(
    requirement: Requirement, ecosystem: Ecosystem = Ecosystem.pypi
) -> Package:
    """Package for a PEP 508 requirement, its name normalized per PEP 503."""
    return Package(
        name=canonicalize_name(requirement.name),
        version=pinned_version(requirement),
        ecosystem=ecosystem,
    )


def parse_requirement_entry(raw_entry: str) -> Package:
    """Parse one requirement line such as ``Django[bcrypt]==3.2.10``.

    Raises:
        ValueError: if the entry is not a valid PEP 508 requirement.
    """
    try:
        requirement = Requirement(raw_entry.strip())
    except InvalidRequirement as e:
        raise ValueError(f"Invalid package format: {raw_entry!r}") from e
    return package_from_requirement(requirement)
