"""CLI entry point for depscope."""

import asyncio
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from depscope import __version__
from depscope.config import Settings, configure_logging
from depscope.errors import DepscopeError
from depscope.models import PackageNetwork

console = Console()


def get_log_path() -> Path:
    """Log file used while the TUI owns the terminal."""
    log_dir = Path.home() / ".cache" / "depscope"
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir / "depscope.log"


def load_settings(max_levels: Optional[int] = None, vulns: Optional[bool] = None) -> Settings:
    """Settings from ``.env``/environment, with command-line overrides."""
    from dotenv import load_dotenv

    load_dotenv()  # Load .env file (e.g. DEPSCOPE_MAX_LEVELS)

    settings = Settings.from_env()
    overrides: dict[str, object] = {}
    if max_levels is not None:
        overrides["max_levels"] = max_levels
    if vulns is not None:
        overrides["vulnerabilities_enabled"] = vulns
    if overrides:
        settings = settings.model_copy(update=overrides)
    return settings


def build_network(manifest: Path, settings: Settings) -> PackageNetwork:
    """Run one build synchronously."""
    from depscope.analyzer import NetworkAnalyzer

    async def _run() -> PackageNetwork:
        async with NetworkAnalyzer(settings=settings) as analyzer:
            return await analyzer.analyze_file(manifest)

    return asyncio.run(_run())


def _build_or_exit(manifest: Path, settings: Settings) -> PackageNetwork:
    try:
        return build_network(manifest, settings)
    except DepscopeError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)


@click.group(invoke_without_command=True)
@click.version_option(version=__version__)
@click.pass_context
def main(ctx: click.Context) -> None:
    """Dependency network and vulnerability explorer."""
    if ctx.invoked_subcommand is None:
        ctx.invoke(tui)


@main.command()
@click.argument("manifest", required=False, type=click.Path(dir_okay=False, path_type=Path))
def tui(manifest: Optional[Path]) -> None:
    """Launch the interactive browser."""
    settings = load_settings()
    configure_logging(settings.log_level, log_file=get_log_path())

    from depscope.app import DepscopeApp

    app = DepscopeApp(settings=settings, manifest=manifest)
    app.run()


@main.command()
@click.argument("manifest", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--max-levels", "-l", type=click.IntRange(min=0), help="Maximum number of levels")
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), help="Output JSON file")
@click.option("--vulns/--no-vulns", default=None, help="Look up known vulnerabilities")
def export(manifest: Path, max_levels: Optional[int], output: Optional[Path], vulns: Optional[bool]) -> None:
    """Build the network and write nodes/edges graph data as JSON."""
    from depscope.network.graph_data import to_graph_data

    settings = load_settings(max_levels, vulns)
    configure_logging(settings.log_level)
    network = _build_or_exit(manifest, settings)

    payload = to_graph_data(network).to_json()
    if output:
        output.write_text(payload + "\n", encoding="utf-8")
        console.print(f"[green]✓[/green] Graph data written to {output}")
    else:
        click.echo(payload)


@main.command()
@click.argument("manifest", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--max-levels", "-l", type=click.IntRange(min=0), help="Maximum number of levels")
@click.option("--vulns/--no-vulns", default=None, help="Look up known vulnerabilities")
def summary(manifest: Path, max_levels: Optional[int], vulns: Optional[bool]) -> None:
    """Print per-level counts and vulnerable packages."""
    settings = load_settings(max_levels, vulns)
    configure_logging(settings.log_level)
    network = _build_or_exit(manifest, settings)

    table = Table(title=f"Package network for {manifest.name}")
    table.add_column("Level", justify="right")
    table.add_column("Packages", justify="right")
    table.add_column("Edges", justify="right")
    for level in network.levels:
        count = sum(1 for pkg in level.packages if not pkg.is_root)
        table.add_row(str(level.index), str(count), str(len(level.dependencies)))
    console.print(table)

    vulnerable = network.vulnerable_packages
    if not vulnerable:
        console.print("[green]No known vulnerabilities found.[/green]")
        return

    vuln_table = Table(title="Vulnerable packages")
    vuln_table.add_column("Package")
    vuln_table.add_column("Level", justify="right")
    vuln_table.add_column("Severity")
    vuln_table.add_column("Count", justify="right")
    for pkg in vulnerable:
        assert pkg.vulnerabilities is not None
        vuln_table.add_row(
            pkg.key,
            str(network.level_of(pkg.key)),
            pkg.vulnerabilities.overall_severity.value.upper(),
            str(len(pkg.vulnerabilities.vulnerabilities)),
        )
    console.print(vuln_table)


if __name__ == "__main__":
    main()
