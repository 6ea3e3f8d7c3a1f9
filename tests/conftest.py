"""Pytest configuration and fixtures."""

import logging
from typing import Sequence, Union
from unittest.mock import MagicMock

import pytest

from depscope.models import (
    Ecosystem,
    Package,
    Severity,
    Vulnerability,
    VulnerabilitySummary,
)
from depscope.resolvers.base import DependencyResolver
from depscope.resolvers.registry import ResolverRegistry
from depscope.vulnerabilities.base import VulnerabilityAnnotator


def pypi(name: str, version: str = "*") -> Package:
    return Package(name=name, version=version, ecosystem=Ecosystem.pypi)


class FakeResolver(DependencyResolver):
    """Resolver answering from an in-memory ``key -> requirements`` graph.

    A value that is an exception instance is raised for that package.
    """

    ecosystem = Ecosystem.pypi

    def __init__(self, graph: dict[str, Union[list[Package], Exception]]) -> None:
        super().__init__(MagicMock(), "https://registry.invalid")
        self.graph = graph

    async def fetch_requirements(self, package: Package) -> list[Package]:
        result = self.graph.get(package.key, [])
        if isinstance(result, Exception):
            raise result
        return list(result)


class RecordingRegistry(ResolverRegistry):
    """Registry that records each batch passed to it."""

    def __init__(self) -> None:
        super().__init__()
        self.batches: list[list[str]] = []

    async def resolve_direct_dependencies(self, packages):  # type: ignore[no-untyped-def]
        packages = list(packages)
        self.batches.append([p.key for p in packages])
        return await super().resolve_direct_dependencies(packages)


class FakeAnnotator(VulnerabilityAnnotator):
    """Attaches a fixed severity to the packages named in ``findings``."""

    def __init__(self, findings: dict[str, Severity] | None = None) -> None:
        self.findings = findings or {}
        self.batches: list[list[str]] = []

    async def annotate(self, packages: Sequence[Package]) -> list[Package]:
        self.batches.append([p.key for p in packages])
        result = []
        for pkg in packages:
            severity = self.findings.get(pkg.key)
            if severity is None:
                result.append(pkg)
            else:
                summary = VulnerabilitySummary.from_vulnerabilities(
                    [Vulnerability(name=f"vuln in {pkg.name}", severity=severity, score=7.5)]
                )
                result.append(pkg.with_vulnerabilities(summary))
        return result


def make_registry(graph: dict[str, Union[list[Package], Exception]]) -> RecordingRegistry:
    registry = RecordingRegistry()
    registry.register(FakeResolver(graph))
    return registry


@pytest.fixture
def sample_requirements():
    """A requirements file covering the common line shapes."""
    return """\
# web stack
Django==3.2.10
requests[socks]==2.25.1 ; python_version >= "3.6"
flask>=2.0
-r base.txt
--index-url https://pypi.org/simple

numpy  # unpinned
"""


@pytest.fixture(autouse=True)
def reset_depscope_logger():
    """Undo configure_logging() so caplog keeps seeing depscope records."""
    yield
    logger = logging.getLogger("depscope")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
