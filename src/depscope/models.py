"""Data models for depscope."""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

from depscope.errors import SelfDependencyError

LATEST_VERSION = "*"
"""Version sentinel meaning "latest / unconstrained"."""

ROOT_PACKAGE_NAME = "Your Package"


# ── Ecosystems ────────────────────────────────────────────────────────────

class Ecosystem(str, Enum):
    """Package-manager universe a package belongs to."""

    pypi = "pypi"
    npm = "npm"


# ── Vulnerabilities ───────────────────────────────────────────────────────

class Severity(str, Enum):
    """Ordinal severity of a vulnerability, lowest first."""

    unknown = "unknown"
    low = "low"
    medium = "medium"
    high = "high"
    critical = "critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_ORDER.index(self)

    @classmethod
    def parse(cls, label: Optional[str]) -> "Severity":
        """Map a free-form label (``HIGH``, ``Moderate`` ...) to a severity."""
        if not label:
            return cls.unknown
        normalized = label.strip().lower()
        if normalized == "moderate":
            return cls.medium
        try:
            return cls(normalized)
        except ValueError:
            return cls.unknown

    @classmethod
    def from_score(cls, score: Optional[float]) -> "Severity":
        """CVSS v3 qualitative rating for a base score."""
        if score is None or score <= 0.0:
            return cls.unknown
        if score >= 9.0:
            return cls.critical
        if score >= 7.0:
            return cls.high
        if score >= 4.0:
            return cls.medium
        return cls.low


_SEVERITY_ORDER = list(Severity)


class Vulnerability(BaseModel):
    """A single known vulnerability."""

    model_config = ConfigDict(frozen=True)

    name: str
    severity: Severity = Severity.unknown
    score: float = 0.0
    cve_id: Optional[str] = None


class VulnerabilitySummary(BaseModel):
    """Vulnerabilities attached to a package, plus their aggregated severity."""

    model_config = ConfigDict(frozen=True)

    vulnerabilities: tuple[Vulnerability, ...] = Field(min_length=1)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def overall_severity(self) -> Severity:
        return max(
            (v.severity for v in self.vulnerabilities),
            key=lambda s: s.rank,
            default=Severity.unknown,
        )

    @classmethod
    def from_vulnerabilities(
        cls, vulnerabilities: list[Vulnerability]
    ) -> Optional["VulnerabilitySummary"]:
        """Build a summary, or ``None`` when there is nothing to report."""
        if not vulnerabilities:
            return None
        return cls(vulnerabilities=tuple(vulnerabilities))


# ── Packages and dependencies ─────────────────────────────────────────────

class Package(BaseModel):
    """A package node. Identity is ``(name, version)`` plus the root flag."""

    model_config = ConfigDict(frozen=True)

    name: str
    version: str = LATEST_VERSION
    ecosystem: Optional[Ecosystem] = None
    vulnerabilities: Optional[VulnerabilitySummary] = None
    is_root: bool = False

    @property
    def key(self) -> str:
        return f"{self.name}@{self.version}"

    @property
    def identity(self) -> tuple[bool, str]:
        """Identity used for equality and dedup; the root never matches a real package."""
        return (self.is_root, self.key)

    @property
    def is_latest(self) -> bool:
        return self.version == LATEST_VERSION

    @property
    def severity(self) -> Optional[Severity]:
        if self.vulnerabilities is None:
            return None
        return self.vulnerabilities.overall_severity

    def with_vulnerabilities(
        self, summary: Optional[VulnerabilitySummary]
    ) -> "Package":
        """Return a copy carrying ``summary``."""
        return self.model_copy(update={"vulnerabilities": summary})

    @classmethod
    def root(cls) -> "Package":
        """The synthetic package standing for the user's own project."""
        return cls(name=ROOT_PACKAGE_NAME, version=LATEST_VERSION, is_root=True)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Package):
            return NotImplemented
        return self.identity == other.identity

    def __hash__(self) -> int:
        return hash(self.identity)

    def __str__(self) -> str:
        return self.key


class Dependency(BaseModel):
    """Directed edge: ``source`` requires ``target``."""

    model_config = ConfigDict(frozen=True)

    source: Package
    target: Package

    @model_validator(mode="after")
    def _reject_self_loop(self) -> "Dependency":
        if self.source.identity == self.target.identity:
            raise SelfDependencyError(self.source.key)
        return self

    @property
    def key(self) -> tuple[tuple[bool, str], tuple[bool, str]]:
        return (self.source.identity, self.target.identity)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Dependency):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def __str__(self) -> str:
        return f"{self.source.key}->{self.target.key}"


# ── Network ───────────────────────────────────────────────────────────────

class NetworkLevel(BaseModel):
    """Packages first discovered at one depth, and the edges that reached them."""

    model_config = ConfigDict(frozen=True)

    index: int
    packages: tuple[Package, ...] = ()
    dependencies: tuple[Dependency, ...] = ()


class PackageNetwork(BaseModel):
    """Leveled dependency graph rooted at the user's project."""

    model_config = ConfigDict(frozen=True)

    levels: tuple[NetworkLevel, ...]

    @property
    def root(self) -> Package:
        return self.levels[0].packages[0]

    @property
    def packages(self) -> list[Package]:
        return [pkg for level in self.levels for pkg in level.packages]

    @property
    def dependencies(self) -> list[Dependency]:
        return [dep for level in self.levels for dep in level.dependencies]

    @property
    def vulnerable_packages(self) -> list[Package]:
        """Packages with a summary, most severe first."""
        found = [pkg for pkg in self.packages if pkg.vulnerabilities is not None]
        return sorted(found, key=lambda p: p.severity.rank, reverse=True)  # type: ignore[union-attr]

    def find(self, key: str) -> Optional[Package]:
        for pkg in self.packages:
            if pkg.key == key:
                return pkg
        return None

    def level_of(self, key: str) -> Optional[int]:
        for level in self.levels:
            if any(pkg.key == key for pkg in level.packages):
                return level.index
        return None

    @property
    def statistics(self) -> dict[str, Any]:
        by_severity: dict[str, int] = {}
        for pkg in self.vulnerable_packages:
            label = pkg.severity.value  # type: ignore[union-attr]
            by_severity[label] = by_severity.get(label, 0) + 1
        return {
            "levels": len(self.levels),
            "packages": len(self.packages) - 1,
            "dependencies": len(self.dependencies),
            "vulnerable_packages": sum(by_severity.values()),
            "by_severity": by_severity,
        }
