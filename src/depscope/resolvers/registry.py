"""Per-ecosystem resolver dispatch."""

import asyncio
import logging
from typing import Iterable, Optional

import httpx

from depscope.config import Settings
from depscope.errors import EcosystemUnknownError, ResolverNotFoundError
from depscope.models import Dependency, Ecosystem, Package
from depscope.resolvers.base import DependencyResolver
from depscope.resolvers.npm import NpmResolver
from depscope.resolvers.pypi import PyPIResolver

logger = logging.getLogger(__name__)


class ResolverRegistry:
    """Dispatch table from ecosystem tag to resolver.

    Adding an ecosystem means registering one more resolver; callers never
    branch on the tag themselves.
    """

    def __init__(self, max_concurrency: int = 16) -> None:
        self._resolvers: dict[Ecosystem, DependencyResolver] = {}
        self.max_concurrency = max_concurrency

    def register(self, resolver: DependencyResolver) -> None:
        self._resolvers[resolver.ecosystem] = resolver

    @property
    def ecosystems(self) -> list[Ecosystem]:
        return list(self._resolvers)

    def resolver_for(self, package: Package) -> DependencyResolver:
        if package.ecosystem is None:
            raise EcosystemUnknownError(package.name)
        resolver = self._resolvers.get(package.ecosystem)
        if resolver is None:
            raise ResolverNotFoundError(package.ecosystem.value)
        return resolver

    async def resolve_direct_dependencies(
        self, packages: Iterable[Package]
    ) -> list[Dependency]:
        """Direct dependency edges for every package, looked up concurrently.

        Dispatch errors (missing tag, unregistered ecosystem) are raised before
        any request is sent. Individual lookup failures only drop that
        package's edges. The result is duplicate-free, in input order.
        """
        jobs = [(pkg, self.resolver_for(pkg)) for pkg in packages]
        if not jobs:
            return []

        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def _resolve(pkg: Package, resolver: DependencyResolver) -> list[Dependency]:
            async with semaphore:
                return await resolver.resolve(pkg)

        results = await asyncio.gather(*(_resolve(pkg, r) for pkg, r in jobs))
        edges = dict.fromkeys(dep for deps in results for dep in deps)
        logger.debug("Resolved %d edges for %d packages", len(edges), len(jobs))
        return list(edges)


def default_registry(
    client: httpx.AsyncClient, settings: Optional[Settings] = None
) -> ResolverRegistry:
    """Registry with the PyPI and npm resolvers."""
    settings = settings or Settings()
    registry = ResolverRegistry(max_concurrency=settings.max_concurrency)
    registry.register(PyPIResolver(client, settings.pypi_url))
    registry.register(NpmResolver(client, settings.npm_url))
    return registry
