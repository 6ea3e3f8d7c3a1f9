"""requirements.txt parser."""

import logging

from depscope.manifests.base import ManifestParser, parse_requirement_entry
from depscope.models import Ecosystem, Package

logger = logging.getLogger(__name__)


class RequirementsParser(ManifestParser):
    """Parses pip requirements files (``requirements*.txt``)."""

    ecosystem = Ecosystem.pypi

    def parse_raw(self, text: str) -> list[str]:
        lines: list[str] = []
        pending = ""
        for line in text.splitlines():
            line = line.split(" #", 1)[0].rstrip()
            if line.endswith("\\"):
                pending += line[:-1] + " "
                continue
            line = (pending + line).strip()
            pending = ""
            # Skip blanks, comments and pip options (-r, -e, --index-url ...)
            if not line or line.startswith("#") or line.startswith("-"):
                continue
            lines.append(line.split(" --", 1)[0].strip())
        return lines

    def parse_entries(self, raw: list[str]) -> list[Package]:
        packages: list[Package] = []
        for entry in raw:
            try:
                packages.append(parse_requirement_entry(entry))
            except ValueError as e:
                logger.warning("Skipping requirement entry: %s", e)
        return packages
