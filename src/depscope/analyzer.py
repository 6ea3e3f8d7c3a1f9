"""End-to-end analysis: manifest in, annotated package network out.

Owns the shared HTTP client and wires the resolver registry and the
vulnerability annotator into a fresh builder for every analysis.
"""

from pathlib import Path
from typing import Callable, Optional, Union

import httpx

from depscope.config import Settings
from depscope.errors import FileProcessingError, NetworkCreationError
from depscope.manifests import ManifestContent
from depscope.models import PackageNetwork
from depscope.network.builder import PackageNetworkBuilder
from depscope.resolvers.registry import ResolverRegistry, default_registry
from depscope.vulnerabilities.base import NullAnnotator, VulnerabilityAnnotator
from depscope.vulnerabilities.osv import OSVAnnotator

USER_AGENT = "depscope/0.1.0"


class NetworkAnalyzer:
    """Builds package networks for manifests using live registries."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        on_status: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.settings = settings or Settings()
        self._on_status = on_status or (lambda _: None)
        self._client: Optional[httpx.AsyncClient] = None

    # ── HTTP plumbing ─────────────────────────────────────────────────────

    async def _client_instance(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
                timeout=self.settings.request_timeout,
                follow_redirects=True,
            )
        return self._client

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "NetworkAnalyzer":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # ── Collaborators ─────────────────────────────────────────────────────

    async def resolvers(self) -> ResolverRegistry:
        return default_registry(await self._client_instance(), self.settings)

    async def annotator(self) -> VulnerabilityAnnotator:
        if not self.settings.vulnerabilities_enabled:
            return NullAnnotator()
        return OSVAnnotator(
            await self._client_instance(),
            base_url=self.settings.osv_url,
            max_concurrency=self.settings.max_concurrency,
        )

    # ── Analysis ──────────────────────────────────────────────────────────

    async def analyze(
        self,
        filename: str,
        content: ManifestContent,
        max_levels: Optional[int] = None,
    ) -> PackageNetwork:
        """Build the network for an in-memory manifest."""
        builder = PackageNetworkBuilder(
            filename,
            content,
            resolvers=await self.resolvers(),
            annotator=await self.annotator(),
            max_levels=self.settings.max_levels if max_levels is None else max_levels,
            on_status=self._on_status,
        )
        return await builder.build()

    async def analyze_file(
        self, path: Union[str, Path], max_levels: Optional[int] = None
    ) -> PackageNetwork:
        """Read a manifest from disk and build its network."""
        path = Path(path)
        try:
            content = path.read_bytes()
        except OSError as e:
            cause = FileProcessingError(f"Failed to read file {path}: {e}")
            raise NetworkCreationError("seed", cause) from e
        return await self.analyze(path.name, content, max_levels=max_levels)
