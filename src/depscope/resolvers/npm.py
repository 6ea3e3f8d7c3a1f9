"""npm registry resolver."""

from urllib.parse import quote

from depscope.manifests.package_json import npm_version
from depscope.models import Ecosystem, Package
from depscope.resolvers.base import DependencyResolver


class NpmResolver(DependencyResolver):
    """Reads ``dependencies`` from ``/<name>/<version|latest>``."""

    ecosystem = Ecosystem.npm

    def release_url(self, package: Package) -> str:
        # Scoped names keep their "@" but the slash must be escaped
        name = quote(package.name, safe="@")
        version = "latest" if package.is_latest else quote(package.version)
        return f"{self.base_url}/{name}/{version}"

    async def fetch_requirements(self, package: Package) -> list[Package]:
        data = await self._get_json(self.release_url(package))
        dependencies = data.get("dependencies") or {}
        return [
            Package(name=name, version=npm_version(spec), ecosystem=self.ecosystem)
            for name, spec in dependencies.items()
        ]
