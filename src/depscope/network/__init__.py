"""Package-network construction and export."""

from depscope.network.builder import DEFAULT_MAX_LEVELS, BuildState, PackageNetworkBuilder
from depscope.network.graph_data import GraphData, color_for, to_graph_data

__all__ = [
    "DEFAULT_MAX_LEVELS",
    "BuildState",
    "GraphData",
    "PackageNetworkBuilder",
    "color_for",
    "to_graph_data",
]
