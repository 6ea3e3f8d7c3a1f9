"""Results screen — one tab per level, plus edges and vulnerabilities."""

from pathlib import Path

from textual.app import ComposeResult
from textual.containers import VerticalScroll
from textual.screen import Screen
from textual.widgets import (
    DataTable,
    Footer,
    Header,
    Markdown,
    Static,
    TabbedContent,
    TabPane,
)

from depscope.models import NetworkLevel, PackageNetwork, Severity
from depscope.network.graph_data import to_graph_data

SEVERITY_ICONS = {
    Severity.critical: "🔴",
    Severity.high: "🟠",
    Severity.medium: "🟡",
    Severity.low: "🔵",
    Severity.unknown: "⚪",
}


def level_title(level: NetworkLevel) -> str:
    if level.index == 0:
        return "📦 Direct"
    return f"🔗 Level {level.index}"


class ResultsScreen(Screen):
    """Displays a built package network."""

    CSS = """
    ResultsScreen {
        layout: vertical;
    }
    #results-header {
        height: 3;
        background: $primary;
        color: $text;
        text-align: center;
        padding: 1 2;
        text-style: bold;
    }
    .section-title {
        text-style: bold;
        margin: 1 0;
        color: $secondary;
    }
    DataTable {
        height: auto;
        margin: 1 0;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("b", "go_back", "Back"),
        ("e", "export", "Export JSON"),
    ]

    def __init__(self, network: PackageNetwork, source: str = "", **kwargs) -> None:  # type: ignore[no-untyped-def]
        super().__init__(**kwargs)
        self.network = network
        self.source = source

    def compose(self) -> ComposeResult:
        stats = self.network.statistics
        yield Header(show_clock=True)
        yield Static(
            f"  📊  {self.source}  ·  {stats['levels']} level(s)  ·  "
            f"{stats['packages']} packages  ·  {stats['vulnerable_packages']} vulnerable  ",
            id="results-header",
        )

        with TabbedContent():
            for level in self.network.levels:
                with TabPane(level_title(level), id=f"level-{level.index}"):
                    yield self._packages_table(level)
            with TabPane("➡ Edges", id="edges"):
                yield self._edges_table()
            with TabPane("🔒 Vulnerabilities", id="vulnerabilities"):
                with VerticalScroll():
                    yield Markdown(self._vulnerabilities_markdown())
        yield Footer()

    def _packages_table(self, level: NetworkLevel) -> DataTable:
        table: DataTable = DataTable(zebra_stripes=True)
        table.add_columns("Package", "Version", "Ecosystem", "Severity", "Vulns")
        for pkg in level.packages:
            if pkg.is_root:
                continue
            severity = pkg.severity
            table.add_row(
                pkg.name,
                pkg.version,
                pkg.ecosystem.value if pkg.ecosystem else "",
                f"{SEVERITY_ICONS[severity]} {severity.value.upper()}" if severity else "",
                str(len(pkg.vulnerabilities.vulnerabilities)) if pkg.vulnerabilities else "",
            )
        return table

    def _edges_table(self) -> DataTable:
        table: DataTable = DataTable(zebra_stripes=True)
        table.add_columns("Level", "From", "To")
        for level in self.network.levels:
            for dep in level.dependencies:
                table.add_row(str(level.index), dep.source.key, dep.target.key)
        return table

    def _vulnerabilities_markdown(self) -> str:
        vulnerable = self.network.vulnerable_packages
        if not vulnerable:
            return "No known vulnerabilities found. ✅"
        lines = ["## Vulnerable packages", ""]
        for pkg in vulnerable:
            summary = pkg.vulnerabilities
            assert summary is not None
            level = self.network.level_of(pkg.key)
            lines.append(
                f"### {SEVERITY_ICONS[summary.overall_severity]} {pkg.key} "
                f"(level {level}, {summary.overall_severity.value.upper()})"
            )
            for vuln in summary.vulnerabilities:
                cve = f" `{vuln.cve_id}`" if vuln.cve_id else ""
                lines.append(
                    f"- **{vuln.severity.value.upper()}** {vuln.score:.1f}{cve} — {vuln.name}"
                )
            lines.append("")
        return "\n".join(lines)

    def action_go_back(self) -> None:
        self.app.pop_screen()

    def action_export(self) -> None:
        target = Path.cwd() / "depscope-graph.json"
        target.write_text(to_graph_data(self.network).to_json(), encoding="utf-8")
        self.notify(f"Graph data written to {target}")
