"""Level-by-level construction of the package network.

The network is built breadth first. Level 0 holds the synthetic root and the
packages declared in the manifest; every further level holds the packages
first reached from the previous level's packages. Registry lookups within a
level run concurrently; levels themselves are strictly sequential because
each level's packages are the input of the next one's lookups.

Two pieces of state live for exactly one :meth:`PackageNetworkBuilder.build`
call: the package identities already claimed by some level, and the edges
already seen. A package identity therefore appears in one level only, and an
edge is never processed twice.
"""

import logging
from typing import Callable, Iterable, Optional, Sequence

from depscope.errors import NetworkCreationError
from depscope.manifests import ManifestContent, parse_manifest
from depscope.models import Dependency, NetworkLevel, Package, PackageNetwork
from depscope.resolvers.registry import ResolverRegistry
from depscope.vulnerabilities.base import VulnerabilityAnnotator

logger = logging.getLogger(__name__)

DEFAULT_MAX_LEVELS = 3


class BuildState:
    """Claimed package identities and seen edges for a single build."""

    def __init__(self) -> None:
        self.claimed: set[tuple[bool, str]] = set()
        self.seen_edges: set[tuple[tuple[bool, str], tuple[bool, str]]] = set()

    def claim(self, packages: Iterable[Package]) -> list[Package]:
        """Keep packages whose identity is not claimed yet, claiming them."""
        fresh: list[Package] = []
        for pkg in packages:
            if pkg.identity in self.claimed:
                continue
            self.claimed.add(pkg.identity)
            fresh.append(pkg)
        return fresh

    def unseen(self, dependencies: Iterable[Dependency]) -> list[Dependency]:
        """Keep edges not seen before, marking them as seen."""
        fresh: list[Dependency] = []
        for dep in dependencies:
            if dep.key in self.seen_edges:
                continue
            self.seen_edges.add(dep.key)
            fresh.append(dep)
        return fresh


class PackageNetworkBuilder:
    """Builds a :class:`PackageNetwork` from one manifest.

    Args:
        filename: Manifest file name; selects the parser.
        content: Manifest file content.
        resolvers: Dispatch table used to look up direct dependencies.
        annotator: Attaches vulnerability summaries to new packages.
        max_levels: Cap on the number of levels. The seed level is always
            built, so ``0`` and ``1`` both yield a single level.
        on_status: Optional progress callback.
    """

    def __init__(
        self,
        filename: str,
        content: ManifestContent,
        resolvers: ResolverRegistry,
        annotator: VulnerabilityAnnotator,
        max_levels: int = DEFAULT_MAX_LEVELS,
        on_status: Optional[Callable[[str], None]] = None,
    ) -> None:
        if isinstance(max_levels, bool) or not isinstance(max_levels, int) or max_levels < 0:
            raise ValueError(f"max_levels must be a non-negative integer, got {max_levels!r}")
        self.filename = filename
        self.content = content
        self.resolvers = resolvers
        self.annotator = annotator
        self.max_levels = max_levels
        self._on_status = on_status or (lambda _: None)

    def _status(self, msg: str) -> None:
        logger.info(msg)
        self._on_status(msg)

    # ── Build ─────────────────────────────────────────────────────────────

    async def build(self) -> PackageNetwork:
        """Build the whole network.

        Raises:
            NetworkCreationError: if parsing, dispatch or any bookkeeping
                fails. Nothing computed so far is returned.
        """
        state = BuildState()
        levels: list[NetworkLevel] = []
        stage = "seed"
        try:
            seed = await self._seed_level(state)
            levels.append(seed)
            if len(seed.packages) == 1:
                return PackageNetwork(levels=tuple(levels))

            for index in range(1, self.max_levels):
                stage = f"level {index}"
                level = await self._next_level(index, levels[-1], state)
                if level is None:
                    break
                levels.append(level)
        except Exception as e:
            raise NetworkCreationError(stage, e) from e

        self._status(f"Network complete: {len(levels)} level(s)")
        return PackageNetwork(levels=tuple(levels))

    async def _seed_level(self, state: BuildState) -> NetworkLevel:
        """Level 0: the root plus the manifest's declared packages."""
        self._status(f"Parsing {self.filename}")
        root = Package.root()
        state.claim([root])

        declared = state.claim(parse_manifest(self.filename, self.content))
        if not declared:
            logger.warning("No direct dependencies found in %s", self.filename)
            return NetworkLevel(index=0, packages=(root,))

        self._status(f"Checking {len(declared)} direct dependencies for vulnerabilities")
        annotated = await self._annotate(declared)
        dependencies = state.unseen(Dependency(source=root, target=pkg) for pkg in annotated)
        return NetworkLevel(
            index=0,
            packages=(root, *annotated),
            dependencies=tuple(dependencies),
        )

    async def _next_level(
        self, index: int, previous: NetworkLevel, state: BuildState
    ) -> Optional[NetworkLevel]:
        """Level ``index``, or ``None`` when nothing new is reachable."""
        sources = [pkg for pkg in previous.packages if not pkg.is_root]
        self._status(f"Level {index}: resolving dependencies of {len(sources)} packages")

        candidates = await self.resolvers.resolve_direct_dependencies(sources)
        edges = state.unseen(candidates)
        if not edges:
            return None

        new_packages = state.claim(dep.target for dep in edges)
        if not new_packages:
            return None

        self._status(f"Level {index}: checking {len(new_packages)} packages for vulnerabilities")
        annotated = {pkg.identity: pkg for pkg in await self._annotate(new_packages)}

        # Only edges reaching a package introduced at this level belong here
        dependencies = [
            Dependency(source=dep.source, target=annotated[dep.target.identity])
            for dep in edges
            if dep.target.identity in annotated
        ]
        logger.info("Level %d: processed %d packages", index, len(annotated))
        return NetworkLevel(
            index=index,
            packages=tuple(annotated.values()),
            dependencies=tuple(dependencies),
        )

    async def _annotate(self, packages: Sequence[Package]) -> list[Package]:
        annotated = await self.annotator.annotate(packages)
        if len(annotated) != len(packages):
            raise RuntimeError(
                f"Annotator returned {len(annotated)} packages for {len(packages)}"
            )
        return annotated
