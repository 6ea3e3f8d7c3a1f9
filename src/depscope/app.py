"""Main Textual TUI application for depscope."""

from pathlib import Path
from typing import Optional

import httpx
from textual.app import App

from depscope.analyzer import NetworkAnalyzer
from depscope.config import Settings
from depscope.errors import NetworkCreationError
from depscope.models import PackageNetwork
from depscope.screens.home import HomeScreen
from depscope.screens.loading import LoadingScreen
from depscope.screens.results import ResultsScreen


def failure_message(error: Exception) -> str:
    """One-line explanation of a failed build for the loading screen."""
    if isinstance(error, NetworkCreationError):
        if isinstance(error.cause, httpx.ConnectError):
            return "❌ Could not reach the package registry. Check your internet connection."
        return f"❌ Failed at {error.stage}: {error.cause}"
    return f"❌ Unexpected error: {error}"


class DepscopeApp(App):
    """TUI for building and browsing package networks."""

    TITLE = "depscope"
    SUB_TITLE = "Dependencies · Levels · Vulnerabilities"

    CSS = """
    Screen {
        background: $background;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
    ]

    def __init__(
        self,
        settings: Optional[Settings] = None,
        manifest: Optional[Path] = None,
    ) -> None:
        super().__init__()
        self.settings = settings or Settings()
        self.manifest = manifest

    def on_mount(self) -> None:
        self.push_screen(
            HomeScreen(
                manifest=str(self.manifest) if self.manifest else "",
                max_levels=self.settings.max_levels,
            )
        )

    def run_analysis(self, path: Path, max_levels: int) -> None:
        """Kick off a build — called from HomeScreen."""
        loading = LoadingScreen(manifest=path.name, max_levels=max_levels)
        self.push_screen(loading)

        async def _do_work() -> None:
            analyzer = NetworkAnalyzer(
                settings=self.settings,
                on_status=lambda msg: self.call_from_thread(loading.record_step, msg),
            )
            try:
                network = await analyzer.analyze_file(path, max_levels=max_levels)
                self.call_from_thread(loading.finish)
                self.call_from_thread(self._show_results, network, path.name)
            except Exception as e:
                self.call_from_thread(loading.fail, failure_message(e))
            finally:
                await analyzer.close()

        self.run_worker(_do_work(), thread=True)

    def _show_results(self, network: PackageNetwork, source: str) -> None:
        """Replace loading screen with results."""
        self.pop_screen()
        self.push_screen(ResultsScreen(network, source=source))

