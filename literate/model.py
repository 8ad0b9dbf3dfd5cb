"""Project model produced from a literate build document."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Sequence

from .environment import ExecutionEnvironment


class ProjectModelBuildingError(RuntimeError):
    """Raised when a project model cannot be built."""


class MalformedDocumentError(ProjectModelBuildingError):
    """Raised when the document's top level is not a mapping."""


class MalformedEnvSpecError(ProjectModelBuildingError):
    """Raised when an environment variable declaration is not ``KEY=VALUE``."""


class ModelNotFoundError(ProjectModelBuildingError):
    """Raised when no marker document exists in the repository."""


@dataclass(frozen=True, slots=True)
class ProjectModel:
    """Immutable result of compiling a build document."""

    environments: tuple[ExecutionEnvironment, ...] = ()
    build: Mapping[ExecutionEnvironment, tuple[str, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    tasks: Mapping[str, tuple[str, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )

    @classmethod
    def create(
        cls,
        environments: Sequence[ExecutionEnvironment],
        build: Mapping[ExecutionEnvironment, Sequence[str]],
        tasks: Mapping[str, Sequence[str]],
    ) -> ProjectModel:
        """Freeze the assembled collections into a model."""
        return cls(
            environments=tuple(environments),
            build=MappingProxyType({env: tuple(cmds) for env, cmds in build.items()}),
            tasks=MappingProxyType({name: tuple(cmds) for name, cmds in tasks.items()}),
        )

    def commands_for(self, environment: ExecutionEnvironment) -> tuple[str, ...]:
        """Return the build commands of ``environment`` (empty when unknown)."""
        return self.build.get(environment, ())

    def to_dict(self) -> dict[str, object]:
        """Return a JSON-serialisable view of the model."""
        return {
            "environments": [
                {"labels": list(env.labels), "variables": dict(env.variables)}
                for env in self.environments
            ],
            "build": [
                {"labels": list(env.labels), "commands": list(commands)}
                for env, commands in self.build.items()
            ],
            "tasks": {name: list(commands) for name, commands in self.tasks.items()},
        }
