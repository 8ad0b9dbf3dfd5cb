"""Execution environment value objects for the build matrix."""

from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, Mapping, Optional


class ExecutionEnvironment:
    """One point of the build matrix: ordered labels plus attached variables.

    Equality and hashing ignore label order so that environments can be used
    as keys when accumulating per-environment command lists.
    """

    __slots__ = ("_labels", "_variables", "_wildcard")

    def __init__(
        self,
        labels: Iterable[str] = (),
        variables: Optional[Mapping[str, str]] = None,
    ) -> None:
        if isinstance(labels, str):
            labels = (labels,)
        self._labels = tuple(dict.fromkeys(labels))
        self._variables = MappingProxyType(dict(variables or {}))
        self._wildcard = False

    @classmethod
    def any(cls) -> ExecutionEnvironment:
        """Return the wildcard environment used to resolve task commands."""
        return _ANY

    @property
    def labels(self) -> tuple[str, ...]:
        return self._labels

    @property
    def variables(self) -> Mapping[str, str]:
        return self._variables

    @property
    def is_wildcard(self) -> bool:
        return self._wildcard

    @property
    def name(self) -> str:
        """Human readable identity, in declaration order."""
        if self._wildcard:
            return "*"
        return "-".join(self._labels) if self._labels else "default"

    def has_label(self, label: str) -> bool:
        return label in self._labels

    def with_label(self, label: str) -> ExecutionEnvironment:
        """Return a copy with ``label`` prepended as the leading label.

        Labels stay unique: if ``label`` is already present it moves to the
        front instead of appearing twice.
        """
        return ExecutionEnvironment((label, *self._labels), self._variables)

    def with_variables(self, variables: Mapping[str, str]) -> ExecutionEnvironment:
        """Return a copy carrying ``variables`` merged over the existing ones."""
        merged = dict(self._variables)
        merged.update(variables)
        return ExecutionEnvironment(self._labels, merged)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ExecutionEnvironment):
            return NotImplemented
        return (
            self._wildcard == other._wildcard
            and frozenset(self._labels) == frozenset(other._labels)
            and dict(self._variables) == dict(other._variables)
        )

    def __hash__(self) -> int:
        return hash(
            (self._wildcard, frozenset(self._labels), frozenset(self._variables.items()))
        )

    def __repr__(self) -> str:
        if self._wildcard:
            return "ExecutionEnvironment.any()"
        return f"ExecutionEnvironment(labels={list(self._labels)!r}, variables={dict(self._variables)!r})"


_ANY = ExecutionEnvironment()
_ANY._wildcard = True
