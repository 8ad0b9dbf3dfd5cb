"""Textual browser for a compiled project model."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from textual import on
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.widgets import Footer, Header

from .config import ProjectModelRequest, load_project_model
from .layout import EntryDetails, EntryList, model_entries
from .model import ProjectModel, ProjectModelBuildingError
from .plugins import LanguageRegistry
from .repository import FileSystemRepository


class ModelBrowserApp(App):
    """Browse the build matrix and tasks of a workspace."""

    TITLE = "literate"
    DEFAULT_CSS = """
    #body {
        height: 1fr;
    }

    #entry-list {
        width: 40;
        border: round $surface;
    }
    """
    BINDINGS = [
        Binding("ctrl+r", "reload", "Reload"),
        Binding("ctrl+q", "quit", "Quit"),
    ]

    def __init__(
        self,
        workspace: Path,
        model: ProjectModel,
        *,
        request: Optional[ProjectModelRequest] = None,
        registry: Optional[LanguageRegistry] = None,
    ) -> None:
        super().__init__()
        self.workspace = workspace.expanduser().resolve()
        self.model = model
        self.request = request or ProjectModelRequest()
        self.registry = registry
        self.entry_list = EntryList(model_entries(model))
        self.entry_details = EntryDetails()

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="body"):
            yield self.entry_list
            yield self.entry_details
        yield Footer()

    def on_mount(self) -> None:
        self.sub_title = str(self.workspace)
        self._show_selected()

    def _show_selected(self) -> None:
        entry = self.entry_list.get_selected_entry()
        if entry:
            self.entry_details.show_entry(entry)
        else:
            self.entry_details.update("The model has no environments or tasks.")

    async def action_reload(self) -> None:
        try:
            model = load_project_model(
                FileSystemRepository(self.workspace), self.request, self.registry
            )
        except (ProjectModelBuildingError, ValueError) as error:
            self.notify(str(error), severity="error")
            return
        self.model = model
        await self.entry_list.set_entries(model_entries(model))
        self._show_selected()
        self.notify(f"Reloaded {len(model.environments)} environment(s)", timeout=3)

    @on(EntryList.EntryHighlighted)
    def handle_entry_highlighted(self, event: EntryList.EntryHighlighted) -> None:
        event.stop()
        self.entry_details.show_entry(event.entry)
