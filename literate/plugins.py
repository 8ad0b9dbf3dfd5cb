"""Language decorator discovery and resolution."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from importlib import metadata
from typing import Any, Mapping, Optional, Protocol, Sequence, runtime_checkable

from .repository import ProjectRepository

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "literate.languages"
DEFAULT_LANGUAGE_ID = "language"


@runtime_checkable
class LanguageDecorator(Protocol):
    """Rewrites a raw build document for one family of languages."""

    supported_languages: frozenset[str]

    def decorate(
        self,
        document: Mapping[str, Any],
        repository: ProjectRepository,
        build_ids: Sequence[str],
    ) -> Mapping[str, Any]:
        ...


@dataclass(slots=True)
class PluginMessage:
    """Represents feedback collected while loading plugins."""

    source: str
    level: str
    text: str


class LanguageRegistry:
    """Ordered collection of language decorators."""

    def __init__(self, *, entry_point_group: str = ENTRY_POINT_GROUP) -> None:
        self.entry_point_group = entry_point_group
        self._decorators: list[tuple[str, LanguageDecorator]] = []
        self._messages: list[PluginMessage] = []

    @property
    def loaded_plugins(self) -> Sequence[str]:
        """Return the names of registered decorators, in resolution order."""
        return tuple(source for source, _ in self._decorators)

    def register(self, decorator: LanguageDecorator, *, source: Optional[str] = None) -> None:
        if not isinstance(decorator, LanguageDecorator):
            raise TypeError(
                "Language decorator must expose 'supported_languages' and 'decorate'"
            )
        self._decorators.append((source or type(decorator).__name__, decorator))

    def discover(self) -> None:
        """Load decorators published under the entry point group."""
        for entry_point in metadata.entry_points(group=self.entry_point_group):
            name = entry_point.name
            try:
                plugin_obj = entry_point.load()
            except Exception as error:
                self._add_message(
                    name, f"Failed to import plugin: {error!r}", level="error"
                )
                continue
            self._activate_plugin(plugin_obj, name)

    def resolve(self, language: object) -> Optional[LanguageDecorator]:
        """Return the first decorator supporting ``language``."""
        if not isinstance(language, str):
            return None
        for _, decorator in self._decorators:
            if language in decorator.supported_languages:
                return decorator
        return None

    def decorate(
        self,
        document: Mapping[str, Any],
        repository: ProjectRepository,
        *,
        language_id: str = DEFAULT_LANGUAGE_ID,
        build_ids: Sequence[str] = ("build",),
    ) -> Mapping[str, Any]:
        """Apply the decorator matching the document's language, if any.

        ``build_ids`` are the configured build section keys; decorators store
        any default build commands under the first of them.
        """
        language = document.get(language_id)
        decorator = self.resolve(language)
        if decorator is None:
            return document
        logger.debug("Decorating document for language %r with %r", language, decorator)
        return decorator.decorate(document, repository, build_ids)

    def consume_messages(self) -> list[PluginMessage]:
        """Return and clear accumulated plugin messages."""
        messages, self._messages = self._messages, []
        return messages

    def _activate_plugin(self, plugin_obj: Any, source: str) -> None:
        decorator = plugin_obj
        if isinstance(plugin_obj, type):
            try:
                decorator = plugin_obj()
            except Exception as error:
                self._add_message(
                    source,
                    f"Plugin raised {error!r} during instantiation",
                    level="error",
                )
                return

        if not isinstance(decorator, LanguageDecorator):
            self._add_message(
                source,
                "Plugin exposes no language decorator; expected 'supported_languages' and 'decorate'",
                level="warning",
            )
            return

        self._decorators.append((source, decorator))
        self._add_message(source, "Registered plugin", level="info")

    def _add_message(self, source: str, text: str, *, level: str = "info") -> None:
        level = level.lower()
        if level not in {"info", "warning", "error"}:
            level = "info"
        logger.log(logging.getLevelName(level.upper()), "%s: %s", source, text)
        self._messages.append(PluginMessage(source=source, level=level, text=text))

