"""Tests for the nodes/edges export."""

import json

import pytest

from depscope.models import (
    Dependency,
    NetworkLevel,
    Package,
    PackageNetwork,
    Severity,
    Vulnerability,
    VulnerabilitySummary,
)
from depscope.network.graph_data import (
    DEFAULT_COLOR,
    ROOT_COLOR,
    SEVERITY_COLORS,
    GraphDataValidationError,
    color_for,
    to_graph_data,
)

from conftest import pypi


def _vulnerable(pkg: Package, severity: Severity) -> Package:
    summary = VulnerabilitySummary.from_vulnerabilities([Vulnerability(name="x", severity=severity)])
    return pkg.with_vulnerabilities(summary)


@pytest.fixture
def network():
    root = Package.root()
    flask = pypi("flask", "2.0.0")
    jinja = _vulnerable(pypi("jinja2", "2.10"), Severity.high)
    return PackageNetwork(levels=(
        NetworkLevel(index=0, packages=(root, flask), dependencies=(Dependency(source=root, target=flask),)),
        NetworkLevel(index=1, packages=(jinja,), dependencies=(Dependency(source=flask, target=jinja),)),
    ))


class TestColorFor:
    def test_root(self):
        assert color_for(Package.root()) == ROOT_COLOR

    def test_no_vulnerabilities(self):
        assert color_for(pypi("six", "1.16.0")) == DEFAULT_COLOR

    @pytest.mark.parametrize("severity", list(Severity))
    def test_by_severity(self, severity):
        assert color_for(_vulnerable(pypi("six", "1.16.0"), severity)) == SEVERITY_COLORS[severity]


class TestToGraphData:
    def test_nodes_and_edges(self, network):
        data = to_graph_data(network)
        assert [n.id for n in data.nodes] == ["Your Package@*", "flask@2.0.0", "jinja2@2.10"]
        assert [n.level for n in data.nodes] == [0, 0, 1]
        assert data.nodes[0].is_root
        assert data.nodes[1].title == "flask\n2.0.0"
        assert data.nodes[2].severity is Severity.high
        assert data.nodes[2].color == SEVERITY_COLORS[Severity.high]

        assert [(e.source, e.target, e.level) for e in data.edges] == [
            ("Your Package@*", "flask@2.0.0", 0),
            ("flask@2.0.0", "jinja2@2.10", 1),
        ]
        assert data.edges[1].color == SEVERITY_COLORS[Severity.high]

    def test_serialized_edge_endpoints(self, network):
        payload = json.loads(to_graph_data(network).to_json())
        edge = payload["edges"][0]
        assert edge["from"] == "Your Package@*"
        assert edge["to"] == "flask@2.0.0"
        assert "source" not in edge
        assert payload["nodes"][2]["severity"] == "high"

    def test_blank_name_rejected(self):
        network = PackageNetwork(levels=(
            NetworkLevel(index=0, packages=(Package.root(), pypi("  ", "1"))),
        ))
        with pytest.raises(GraphDataValidationError) as exc_info:
            to_graph_data(network)
        assert exc_info.value.field == "package.name"
