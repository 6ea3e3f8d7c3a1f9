"""npm package.json parser."""

import json
import re
from typing import Any

from depscope.manifests.base import ManifestParser
from depscope.models import LATEST_VERSION, Ecosystem, Package

DEPENDENCY_SECTIONS = ("dependencies", "devDependencies")

_EXACT_SEMVER = re.compile(r"^[=v]?(\d+\.\d+\.\d+(?:[-+][0-9A-Za-z.+-]+)?)$")


def npm_version(spec: Any) -> str:
    """Exact semver from an npm range, or :data:`LATEST_VERSION`.

    ``"1.2.3"`` and ``"=1.2.3"`` are pinned; ``"^1.2.3"``, ``"~1.2"``,
    tags and URLs are not.
    """
    if not isinstance(spec, str):
        return LATEST_VERSION
    match = _EXACT_SEMVER.match(spec.strip())
    return match.group(1) if match else LATEST_VERSION


class PackageJsonParser(ManifestParser):
    """Parses ``package.json`` dependency sections."""

    ecosystem = Ecosystem.npm

    def parse_raw(self, text: str) -> dict[str, Any]:
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError("package.json must contain a JSON object")
        return data

    def parse_entries(self, raw: dict[str, Any]) -> list[Package]:
        packages: list[Package] = []
        for section in DEPENDENCY_SECTIONS:
            for name, spec in (raw.get(section) or {}).items():
                packages.append(
                    Package(name=name, version=npm_version(spec), ecosystem=self.ecosystem)
                )
        return packages
