"""Home screen — manifest path and depth selection."""

from pathlib import Path

from textual import on
from textual.app import ComposeResult
from textual.containers import Center, Vertical
from textual.screen import Screen
from textual.widgets import Button, Footer, Header, Input, Label, Select, Static

from depscope.manifests import PARSERS


class HomeScreen(Screen):
    """Initial screen to collect the manifest and the level count."""

    CSS = """
    HomeScreen {
        align: center middle;
    }
    #home-container {
        width: 72;
        height: auto;
        padding: 1 4;
        border: round $primary;
        background: $surface;
    }
    #title {
        text-align: center;
        color: $accent;
        text-style: bold;
        margin-bottom: 0;
    }
    #subtitle {
        text-align: center;
        color: $text-muted;
        margin-bottom: 2;
    }
    .field-label {
        margin-top: 1;
        color: $text;
    }
    #start-btn {
        margin-top: 2;
        width: 100%;
    }
    #error-label {
        color: $error;
        text-align: center;
        margin-top: 1;
    }
    """

    LEVEL_OPTIONS = [
        ("Direct dependencies only", 1),
        ("2 levels", 2),
        ("3 levels", 3),
        ("4 levels", 4),
        ("5 levels", 5),
    ]

    def __init__(self, manifest: str = "", max_levels: int = 3, **kwargs) -> None:  # type: ignore[no-untyped-def]
        super().__init__(**kwargs)
        self.initial_manifest = manifest
        self.initial_levels = max_levels if 1 <= max_levels <= 5 else 3

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Center():
            with Vertical(id="home-container"):
                yield Static("depscope", id="title")
                yield Static(
                    "Dependency tree · Vulnerabilities",
                    id="subtitle",
                )
                yield Label("Manifest file:", classes="field-label")
                yield Input(
                    value=self.initial_manifest,
                    placeholder="e.g. ./requirements.txt, ./Pipfile, ./package.json",
                    id="manifest-input",
                )
                yield Label("Depth:", classes="field-label")
                yield Select(
                    [(label, levels) for label, levels in self.LEVEL_OPTIONS],
                    value=self.initial_levels,
                    id="levels-select",
                )
                yield Button("▶  Build Network", id="start-btn", variant="primary")
                yield Label("", id="error-label")
        yield Footer()

    def on_mount(self) -> None:
        self.query_one("#manifest-input", Input).focus()

    @on(Button.Pressed, "#start-btn")
    def start_analysis(self) -> None:
        manifest_input = self.query_one("#manifest-input", Input)
        levels_select = self.query_one("#levels-select", Select)
        error_label = self.query_one("#error-label", Label)

        path = Path(manifest_input.value.strip()).expanduser()
        if not manifest_input.value.strip():
            error_label.update("⚠  Enter the path of a manifest file")
            return
        if not path.is_file():
            error_label.update(f"⚠  File not found: {path}")
            return
        if not any(keyword in path.name.lower() for keyword in PARSERS):
            error_label.update("⚠  Supported: requirements*.txt, Pipfile, package.json")
            return

        levels = levels_select.value
        if levels is Select.BLANK:
            levels = 3

        error_label.update("")
        self.app.run_analysis(path, int(levels))  # type: ignore[attr-defined]

    @on(Input.Submitted, "#manifest-input")
    def submit_on_enter(self) -> None:
        self.start_analysis()
