"""Pipfile parser."""

import logging
import tomllib
from typing import Any

from packaging.requirements import InvalidRequirement, Requirement
from packaging.utils import canonicalize_name

from depscope.manifests.base import ManifestParser, pinned_version
from depscope.models import LATEST_VERSION, Ecosystem, Package

logger = logging.getLogger(__name__)

PACKAGE_SECTIONS = ("packages", "dev-packages")


class PipfileParser(ManifestParser):
    """Parses Pipenv ``Pipfile`` manifests (TOML)."""

    ecosystem = Ecosystem.pypi

    def parse_raw(self, text: str) -> dict[str, Any]:
        return tomllib.loads(text)

    def parse_entries(self, raw: dict[str, Any]) -> list[Package]:
        packages: list[Package] = []
        for section in PACKAGE_SECTIONS:
            for name, spec in (raw.get(section) or {}).items():
                packages.append(self._parse_entry(name, spec))
        return packages

    def _parse_entry(self, name: str, spec: Any) -> Package:
        # {git = "...", ref = "..."} style entries carry no version
        if isinstance(spec, dict):
            spec = spec.get("version", LATEST_VERSION)
        if not isinstance(spec, str):
            logger.warning("Unexpected version format for %s in Pipfile: %r", name, spec)
            spec = LATEST_VERSION

        version = LATEST_VERSION
        spec = spec.strip()
        if spec and spec != LATEST_VERSION:
            try:
                version = pinned_version(Requirement(f"{name}{spec}"))
            except InvalidRequirement:
                logger.warning("Invalid version %r for %s in Pipfile", spec, name)
        return Package(name=canonicalize_name(name.strip()), version=version, ecosystem=self.ecosystem)
