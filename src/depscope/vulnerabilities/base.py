"""Vulnerability annotator interface."""

from abc import ABC, abstractmethod
from typing import Sequence

from depscope.models import Package


class VulnerabilityAnnotator(ABC):
    """Attaches vulnerability summaries to packages.

    Implementations must return one package per input, in input order: either
    the input itself or a copy carrying a non-empty summary. Data-source
    failures degrade to "no data" instead of raising.
    """

    @abstractmethod
    async def annotate(self, packages: Sequence[Package]) -> list[Package]:
        ...


class NullAnnotator(VulnerabilityAnnotator):
    """Annotator used when vulnerability lookups are disabled."""

    async def annotate(self, packages: Sequence[Package]) -> list[Package]:
        return list(packages)
