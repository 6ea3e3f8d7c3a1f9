"""Build progress screen — one line per builder step, grouped by level."""

import re
from typing import Optional

from textual.app import ComposeResult
from textual.containers import Center, Vertical
from textual.screen import Screen
from textual.widgets import Footer, Header, Label, Log, ProgressBar, Static

# "Level 2: resolving dependencies of 14 packages"
_LEVEL_STEP = re.compile(r"^Level (\d+): (resolving|checking) .*?(\d+) packages")
# "Checking 5 direct dependencies for vulnerabilities"
_SEED_STEP = re.compile(r"^Checking (\d+) direct dependencies")


def parse_step(message: str) -> tuple[Optional[int], Optional[int]]:
    """``(level, package_count)`` announced by a builder status message.

    Parsing the manifest counts as level 0 with no package count yet.
    Messages that name no level give ``(None, None)``.
    """
    if message.startswith("Parsing "):
        return 0, None
    seed = _SEED_STEP.match(message)
    if seed:
        return 0, int(seed.group(1))
    step = _LEVEL_STEP.match(message)
    if step:
        return int(step.group(1)), int(step.group(3))
    return None, None


def level_progress(level: int, max_levels: int, annotating: bool = False) -> int:
    """Percentage for a step; each level gets an equal slice, capped below 100."""
    slices = max(max_levels, 1)
    done = level + (0.5 if annotating else 0.0)
    return min(int(done / slices * 100), 95)


class LoadingScreen(Screen):
    """Shown while a package network is built.

    The builder's status messages are appended to a step log; the level line
    and progress bar follow the deepest level reached so far.
    """

    BINDINGS = [
        ("b", "go_back", "Back"),
    ]

    CSS = """
    LoadingScreen {
        align: center middle;
    }
    #build-container {
        width: 80;
        height: auto;
        padding: 1 3;
        border: round $primary;
        background: $surface;
    }
    #build-title {
        text-align: center;
        text-style: bold;
        margin-bottom: 1;
    }
    #level-label {
        text-align: center;
    }
    #step-log {
        height: 10;
        margin: 1 0;
        border: tall $panel;
    }
    #hint-label {
        text-align: center;
        color: $text-muted;
    }
    """

    def __init__(self, manifest: str = "", max_levels: int = 3, **kwargs) -> None:  # type: ignore[no-untyped-def]
        super().__init__(**kwargs)
        self.manifest = manifest
        self.max_levels = max(max_levels, 1)
        self.current_level = 0
        self.level_packages: dict[int, int] = {}
        self.failed = False

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Center():
            with Vertical(id="build-container"):
                yield Static(f"🔍  Building package network for {self.manifest} …", id="build-title")
                yield Label(self._level_text(), id="level-label")
                yield ProgressBar(total=100, show_eta=False, id="progress-bar")
                yield Log(id="step-log", highlight=False)
                yield Label("", id="hint-label")
        yield Footer()

    def _level_text(self) -> str:
        text = f"Level {self.current_level + 1} of {self.max_levels}"
        count = self.level_packages.get(self.current_level)
        if count is not None:
            text += f" · {count} packages"
        return text

    def record_step(self, message: str) -> None:
        """Log one builder status message and advance the level display."""
        level, count = parse_step(message)
        if level is not None:
            self.current_level = max(self.current_level, level)
            if count is not None:
                self.level_packages[level] = count
            annotating = "vulnerabilities" in message
            self.query_one("#level-label", Label).update(self._level_text())
            self.query_one("#progress-bar", ProgressBar).update(
                progress=level_progress(self.current_level, self.max_levels, annotating)
            )
        self.query_one("#step-log", Log).write_line(message)

    def finish(self) -> None:
        self.query_one("#progress-bar", ProgressBar).update(progress=100)
        self.query_one("#step-log", Log).write_line("Complete!")

    def fail(self, message: str) -> None:
        """Show the error and how to get back to the home screen."""
        self.failed = True
        self.query_one("#step-log", Log).write_line(message)
        self.query_one("#hint-label", Label).update(
            "Press [b]  b  [/b] to go back and try again."
        )

    def action_go_back(self) -> None:
        """Return to the home screen."""
        self.app.pop_screen()
