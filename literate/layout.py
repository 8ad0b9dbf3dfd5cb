"""UI widgets for the model browser."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional

from rich.markup import escape
from textual.message import Message
from textual.widgets import ListItem, ListView, Static

from .model import ProjectModel


@dataclass(slots=True)
class ModelEntry:
    """One selectable row: a matrix environment or a task."""

    kind: str
    name: str
    commands: tuple[str, ...] = ()
    labels: tuple[str, ...] = ()
    variables: Mapping[str, str] = field(default_factory=dict)


def model_entries(model: ProjectModel) -> list[ModelEntry]:
    """Flatten a model into browser rows: environments first, then tasks."""
    entries = [
        ModelEntry(
            kind="environment",
            name=environment.name,
            commands=model.commands_for(environment),
            labels=environment.labels,
            variables=dict(environment.variables),
        )
        for environment in model.environments
    ]
    entries.extend(
        ModelEntry(kind="task", name=name, commands=commands)
        for name, commands in model.tasks.items()
    )
    return entries


class EntryListItem(ListItem):
    """Individual entry in the model list."""

    def __init__(self, entry: ModelEntry) -> None:
        prefix = "env" if entry.kind == "environment" else "task"
        super().__init__(Static(f"[dim]{prefix}[/dim] {escape(entry.name)}"))
        self.entry = entry


class EntryList(ListView):
    """List of environments and tasks of the loaded model."""

    class EntryHighlighted(Message):
        def __init__(self, entry: ModelEntry) -> None:
            self.entry = entry
            super().__init__()

    def __init__(self, entries: Iterable[ModelEntry] = ()) -> None:
        super().__init__(id="entry-list")
        self._items = list(entries)

    def on_mount(self) -> None:
        for entry in self._items:
            self.append(EntryListItem(entry))
        if self.children:
            self.index = 0

    async def set_entries(self, entries: Iterable[ModelEntry]) -> None:
        self._items = list(entries)
        await self.clear()
        await self.extend(EntryListItem(entry) for entry in self._items)
        self.index = 0 if self._items else None

    def get_selected_entry(self) -> Optional[ModelEntry]:
        if self.index is None:
            return None
        if self.index < 0 or self.index >= len(self._items):
            return None
        return self._items[self.index]

    def on_list_view_highlighted(self, event: ListView.Highlighted) -> None:
        entry = self.get_selected_entry()
        if entry:
            event.stop()
            self.post_message(self.EntryHighlighted(entry))


class EntryDetails(Static):
    """Display labels, variables and commands of the highlighted entry."""

    DEFAULT_CSS = """
    EntryDetails {
        border: round $surface;
        padding: 0 1;
        height: 1fr;
    }
    """

    def __init__(self) -> None:
        super().__init__(id="entry-details")
        self.update("Select an environment or task to view its commands.")

    def show_entry(self, entry: ModelEntry) -> None:
        self.update(render_entry(entry))


def render_entry(entry: ModelEntry) -> str:
    lines = [f"[bold]{escape(entry.name)}[/bold] [dim]({entry.kind})[/dim]"]
    if entry.labels:
        lines.append("Labels: " + ", ".join(escape(label) for label in entry.labels))
    for key, value in entry.variables.items():
        lines.append(f"[cyan]{escape(key)}[/cyan]={escape(value)}")
    lines.append("")
    if entry.commands:
        lines.extend(f"$ {escape(command)}" for command in entry.commands)
    else:
        lines.append("[dim]No commands.[/dim]")
    return "\n".join(lines)
