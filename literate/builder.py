"""Compile a parsed build document into a :class:`ProjectModel`.

The document is the generic tree produced by the YAML front-end: mappings of
string keys, lists, and scalar strings. Any other node (``None``, numbers that
slipped through a custom parser, ...) is ignored wherever it appears.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Optional

from .environment import ExecutionEnvironment
from .model import MalformedDocumentError, MalformedEnvSpecError, ProjectModel

logger = logging.getLogger(__name__)

GLOBAL_ENVVARS_KEY = "global"


def _is_sequence(value: object) -> bool:
    return isinstance(value, (list, tuple))


# ---------------------------------------------------------------------
# Environment variables
# ---------------------------------------------------------------------

def parse_env_assignments(text: str) -> dict[str, str]:
    """Parse whitespace separated ``KEY=VALUE`` tokens."""
    result: dict[str, str] = {}
    for token in text.split():
        key, sep, value = token.partition("=")
        if not sep:
            raise MalformedEnvSpecError(
                f"Environment variable '{token}' must have format KEY=VALUE"
            )
        result[key] = value
    return result


def _parse_global_env(value: object) -> dict[str, str]:
    if isinstance(value, str):
        return parse_env_assignments(value)
    if _is_sequence(value):
        result: dict[str, str] = {}
        for item in value:
            if not isinstance(item, str):
                raise MalformedEnvSpecError(
                    "Only simple lists of strings are supported for environment variables"
                )
            result.update(parse_env_assignments(item))
        return result
    return {}


def consume_env_section(document: Mapping[str, Any], envvars_id: str) -> dict[str, str]:
    """Return the flat variable mapping declared under ``envvars_id``."""
    section = document.get(envvars_id)
    if isinstance(section, str):
        return parse_env_assignments(section)
    if isinstance(section, Mapping):
        return _parse_global_env(section.get(GLOBAL_ENVVARS_KEY))
    if _is_sequence(section):
        return _parse_global_env(section)
    return {}


def apply_variables(
    environments: Iterable[ExecutionEnvironment], variables: Mapping[str, str]
) -> list[ExecutionEnvironment]:
    return [environment.with_variables(variables) for environment in environments]


# ---------------------------------------------------------------------
# Environment matrix
# ---------------------------------------------------------------------

def expand_environments(value: object, depth: int = 0) -> list[ExecutionEnvironment]:
    """Expand an environments section into the ordered build matrix."""
    if isinstance(value, str):
        return [ExecutionEnvironment((value,))]
    if isinstance(value, Mapping):
        return _expand_mapping(value, depth)
    if _is_sequence(value):
        return _expand_list(value, depth)
    return [ExecutionEnvironment()]


def _expand_mapping(mapping: Mapping[str, Any], depth: int) -> list[ExecutionEnvironment]:
    environments: list[ExecutionEnvironment] = []
    for key, value in mapping.items():
        for environment in expand_environments(value, depth + 1):
            environments.append(environment.with_label(key))
    return environments


def _expand_list(items: Iterable[Any], depth: int) -> list[ExecutionEnvironment]:
    items = list(items)
    # A flat list of strings at the top level names ONE environment carrying
    # all of those labels, not a list of alternatives. An empty list is
    # therefore one label-less environment. Nested lists keep the
    # alternatives reading at every depth.
    if depth == 0 and all(isinstance(item, str) for item in items):
        return [ExecutionEnvironment(items)]
    return _expand_complex_list(items)


def _expand_complex_list(items: Iterable[Any]) -> list[ExecutionEnvironment]:
    environments: list[ExecutionEnvironment] = []
    for item in items:
        if isinstance(item, str):
            environments.append(ExecutionEnvironment((item,)))
        elif _is_sequence(item):
            environments.append(
                ExecutionEnvironment(label for label in item if isinstance(label, str))
            )
    return environments


# ---------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------

def extract_commands(
    value: object, environment: Optional[ExecutionEnvironment] = None
) -> list[str]:
    """Return the commands of ``value`` that apply to ``environment``.

    Mapping sections are keyed by environment label. Without a concrete
    environment (``None`` or the wildcard) they are ignored.
    """
    if isinstance(value, str):
        return [value]
    if _is_sequence(value):
        commands: list[str] = []
        for item in value:
            commands.extend(extract_commands(item, environment))
        return commands
    if isinstance(value, Mapping):
        if environment is None or environment.is_wildcard:
            return []
        commands = []
        for key, item in value.items():
            if environment.has_label(key):
                commands.extend(extract_commands(item, environment))
        return commands
    return []


# ---------------------------------------------------------------------
# Assembly
# ---------------------------------------------------------------------

def build_project_model(
    document: object,
    build_ids: Iterable[str],
    environments_id: str,
    envvars_id: str,
) -> ProjectModel:
    """Compile ``document`` into environments, build commands and tasks.

    The build map holds one entry per distinct environment. Matrix entries
    that compare equal (same label set and variables) share that entry, so
    their commands are collected once rather than once per repetition.
    """
    if not isinstance(document, Mapping):
        raise MalformedDocumentError(
            f"Build document must be a mapping, got {type(document).__name__}"
        )
    build_ids = tuple(dict.fromkeys(build_ids))
    build_id_set = frozenset(build_ids)

    environments = expand_environments(document.get(environments_id))
    environments = apply_variables(
        environments, consume_env_section(document, envvars_id)
    )
    logger.debug("Expanded build matrix into %d environment(s)", len(environments))

    build: dict[ExecutionEnvironment, list[str]] = {
        environment: [] for environment in environments
    }
    for build_id in build_ids:
        if build_id not in document:
            continue
        section = document[build_id]
        for environment, commands in build.items():
            commands.extend(extract_commands(section, environment))

    tasks = {
        key: extract_commands(value, ExecutionEnvironment.any())
        for key, value in document.items()
        if key not in build_id_set
    }
    return ProjectModel.create(environments, build, tasks)
