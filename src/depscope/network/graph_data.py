"""Renderer-neutral nodes/edges view of a package network."""

import json
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from depscope.errors import DepscopeError
from depscope.models import Dependency, Package, PackageNetwork, Severity

SEVERITY_COLORS: dict[Severity, str] = {
    Severity.low: "#FFC107",
    Severity.medium: "#FF9800",
    Severity.high: "#F44336",
    Severity.critical: "#B71C1C",
    Severity.unknown: "#848484",
}
ROOT_COLOR = "#4CAF50"
DEFAULT_COLOR = "#848484"


class GraphDataValidationError(DepscopeError):
    """A package or edge cannot be turned into graph data."""

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field


class GraphNode(BaseModel):
    """One package as a graph node."""

    id: str
    title: str
    level: int
    color: str
    is_root: bool = False
    severity: Optional[Severity] = None


class GraphEdge(BaseModel):
    """One dependency as a graph edge."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    source: str = Field(serialization_alias="from")
    target: str = Field(serialization_alias="to")
    level: int
    color: str


class GraphData(BaseModel):
    """Nodes and edges ready for a graph renderer."""

    nodes: list[GraphNode] = Field(default_factory=list)
    edges: list[GraphEdge] = Field(default_factory=list)

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)


def color_for(pkg: Package) -> str:
    """Node color: root, severity of its vulnerabilities, or the default."""
    if pkg.is_root:
        return ROOT_COLOR
    if pkg.severity is None:
        return DEFAULT_COLOR
    return SEVERITY_COLORS.get(pkg.severity, DEFAULT_COLOR)


def to_graph_data(network: PackageNetwork) -> GraphData:
    """Flatten ``network`` into nodes and edges, level by level."""
    data = GraphData()
    for level in network.levels:
        data.nodes.extend(_node(pkg, level.index) for pkg in level.packages)
        data.edges.extend(_edge(dep, level.index) for dep in level.dependencies)
    return data


def _node(pkg: Package, level: int) -> GraphNode:
    _validate(pkg, "package")
    return GraphNode(
        id=pkg.key,
        title=f"{pkg.name}\n{pkg.version}",
        level=level,
        color=color_for(pkg),
        is_root=pkg.is_root,
        severity=pkg.severity,
    )


def _edge(dep: Dependency, level: int) -> GraphEdge:
    _validate(dep.source, "dependency.source")
    _validate(dep.target, "dependency.target")
    return GraphEdge(
        id=f"{dep.source.key}->{dep.target.key}",
        source=dep.source.key,
        target=dep.target.key,
        level=level,
        color=color_for(dep.target),
    )


def _validate(pkg: Package, field: str) -> None:
    if not pkg.name.strip():
        raise GraphDataValidationError("Package name must be a non-empty string", f"{field}.name")
    if not pkg.version.strip():
        raise GraphDataValidationError(
            "Package version must be a non-empty string", f"{field}.version"
        )
