"""Resolver interface: one package in, its direct dependency edges out."""

import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx

from depscope.errors import SelfDependencyError
from depscope.models import Dependency, Ecosystem, Package

logger = logging.getLogger(__name__)


class DependencyResolver(ABC):
    """Looks up a package's declared dependencies in one ecosystem's registry."""

    ecosystem: Ecosystem

    def __init__(self, client: httpx.AsyncClient, base_url: str) -> None:
        self.client = client
        self.base_url = base_url.rstrip("/")

    # ── HTTP plumbing ─────────────────────────────────────────────────────

    async def _get_json(self, url: str) -> Any:
        logger.debug("GET %s", url)
        resp = await self.client.get(url)
        resp.raise_for_status()
        return resp.json()

    # ── Lookup ────────────────────────────────────────────────────────────

    @abstractmethod
    async def fetch_requirements(self, package: Package) -> list[Package]:
        """Return the packages ``package`` directly requires.

        May raise on registry errors; :meth:`resolve` turns those into an
        empty result.
        """

    async def resolve(self, package: Package) -> list[Dependency]:
        """Direct dependency edges of ``package``; ``[]`` if the lookup fails."""
        try:
            required = await self.fetch_requirements(package)
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                logger.warning("Package not found in %s registry: %s", self.ecosystem.value, package.key)
            else:
                logger.warning(
                    "Registry error for %s (HTTP %s)", package.key, e.response.status_code
                )
            return []
        except httpx.HTTPError as e:
            logger.warning("Error fetching %s from registry: %s", package.key, e)
            return []
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning("Malformed registry response for %s: %s", package.key, e)
            return []
        except Exception as e:
            logger.warning("Unexpected error resolving %s: %s", package.key, e, exc_info=True)
            return []

        dependencies: list[Dependency] = []
        for target in required:
            try:
                dependencies.append(Dependency(source=package, target=target))
            except SelfDependencyError:
                logger.warning("Ignoring self-dependency declared by %s", package.key)
        return dependencies
