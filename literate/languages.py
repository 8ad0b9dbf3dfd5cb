"""Built-in language decorators.

Each decorator only fills in a default build section, stored under the first
configured build id. Documents that already define any build id are returned
unchanged.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

from .repository import ProjectRepository

DEFAULT_BUILD_IDS: Sequence[str] = ("build",)


def _with_default_build(
    document: Mapping[str, Any], build_ids: Sequence[str], command: Optional[str]
) -> Mapping[str, Any]:
    if command is None or not build_ids:
        return document
    if any(build_id in document for build_id in build_ids):
        return document
    return {**document, build_ids[0]: command}


class MavenLanguage:
    """Default Maven build for JVM projects that ship a ``pom.xml``."""

    supported_languages = frozenset({"java", "jvm", "groovy", "scala"})
    command = "mvn -B install"

    def decorate(
        self,
        document: Mapping[str, Any],
        repository: ProjectRepository,
        build_ids: Sequence[str] = DEFAULT_BUILD_IDS,
    ) -> Mapping[str, Any]:
        command = self.command if repository.is_file("pom.xml") else None
        return _with_default_build(document, build_ids, command)

    def __repr__(self) -> str:
        return "MavenLanguage()"


class PythonLanguage:
    """Default install step for Python projects."""

    supported_languages = frozenset({"python"})

    def decorate(
        self,
        document: Mapping[str, Any],
        repository: ProjectRepository,
        build_ids: Sequence[str] = DEFAULT_BUILD_IDS,
    ) -> Mapping[str, Any]:
        if repository.is_file("pyproject.toml") or repository.is_file("setup.py"):
            command = "pip install -e ."
        elif repository.is_file("requirements.txt"):
            command = "pip install -r requirements.txt"
        else:
            command = None
        return _with_default_build(document, build_ids, command)

    def __repr__(self) -> str:
        return "PythonLanguage()"
