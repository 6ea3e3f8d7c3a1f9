"""PyPI JSON API resolver."""

import logging

from packaging.requirements import InvalidRequirement, Requirement

from depscope.manifests import package_from_requirement
from depscope.models import Ecosystem, Package
from depscope.resolvers.base import DependencyResolver

logger = logging.getLogger(__name__)


class PyPIResolver(DependencyResolver):
    """Reads ``info.requires_dist`` from ``/pypi/<name>[/<version>]/json``."""

    ecosystem = Ecosystem.pypi

    def release_url(self, package: Package) -> str:
        if package.is_latest:
            return f"{self.base_url}/pypi/{package.name}/json"
        return f"{self.base_url}/pypi/{package.name}/{package.version}/json"

    async def fetch_requirements(self, package: Package) -> list[Package]:
        data = await self._get_json(self.release_url(package))
        requires_dist = data["info"].get("requires_dist") or []
        return parse_requires_dist(requires_dist)


def parse_requires_dist(entries: list[str]) -> list[Package]:
    """Packages from ``requires_dist``, skipping optional (extra-only) entries."""
    packages: list[Package] = []
    for entry in entries:
        try:
            requirement = Requirement(entry)
        except InvalidRequirement:
            logger.warning("Failed to parse requirement: %s", entry)
            continue
        if requirement.marker is not None and "extra" in str(requirement.marker):
            continue
        packages.append(package_from_requirement(requirement))
    return packages
