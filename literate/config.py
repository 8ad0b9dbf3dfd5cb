"""Locate, parse and compile the build document of a project."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import IO, Any, Optional, Sequence, Union

import yaml

from .builder import build_project_model
from .model import MalformedDocumentError, ModelNotFoundError, ProjectModel
from .plugins import DEFAULT_LANGUAGE_ID, LanguageRegistry
from .repository import ProjectRepository

logger = logging.getLogger(__name__)

DEFAULT_BASENAME = "literate"
DEFAULT_BUILD_ID = "build"
DEFAULT_ENVIRONMENTS_ID = "environments"
DEFAULT_ENVVARS_ID = "env"
LEGACY_MARKER_FILES: Sequence[str] = (".travis.yml",)

_BUILD_ID_SEPARATOR = re.compile(r"[, ]")


@dataclass(slots=True)
class ProjectModelRequest:
    """Names of the document sections the compiler reads."""

    basename: str = DEFAULT_BASENAME
    build_id: str = DEFAULT_BUILD_ID
    environments_id: str = DEFAULT_ENVIRONMENTS_ID
    envvars_id: str = DEFAULT_ENVVARS_ID
    language_id: str = DEFAULT_LANGUAGE_ID

    @property
    def build_ids(self) -> tuple[str, ...]:
        """Build id keys in declaration order, without blanks or repeats."""
        tokens = (token for token in _BUILD_ID_SEPARATOR.split(self.build_id) if token)
        return tuple(dict.fromkeys(tokens))


def marker_files(basename: str) -> tuple[str, ...]:
    """Candidate document names, highest priority first."""
    return (f".{basename}.yml", f".{basename}.yaml", *LEGACY_MARKER_FILES)


class DocumentLoader(yaml.SafeLoader):
    """Safe loader that keeps every non-null scalar as its source text."""


for _tag in ("bool", "int", "float", "timestamp"):
    DocumentLoader.add_constructor(
        f"tag:yaml.org,2002:{_tag}", yaml.SafeLoader.construct_yaml_str
    )


def parse_document(stream: Union[str, bytes, IO[Any]]) -> Any:
    """Parse a YAML build document into plain mappings, lists and strings."""
    loaded = yaml.load(stream, Loader=DocumentLoader)
    return {} if loaded is None else loaded


def find_marker_file(
    repository: ProjectRepository, basename: str = DEFAULT_BASENAME
) -> Optional[str]:
    for candidate in marker_files(basename):
        if repository.is_file(candidate):
            return candidate
    return None


def load_document(repository: ProjectRepository, name: str) -> Any:
    with repository.get(name) as handle:
        try:
            return parse_document(handle)
        except yaml.YAMLError as error:
            raise MalformedDocumentError(f"{name} is not valid YAML: {error}") from error


def load_project_model(
    repository: ProjectRepository,
    request: Optional[ProjectModelRequest] = None,
    registry: Optional[LanguageRegistry] = None,
) -> ProjectModel:
    """Build the project model described by ``repository``'s marker file."""

    request = request or ProjectModelRequest()
    name = find_marker_file(repository, request.basename)
    if name is None:
        raise ModelNotFoundError("Not a YAML based literate project")
    logger.debug("Reading build document %s from %r", name, repository)

    document = load_document(repository, name)
    if not isinstance(document, dict):
        raise MalformedDocumentError(f"Build document {name} must be a mapping")
    if registry is not None:
        document = registry.decorate(
            document,
            repository,
            language_id=request.language_id,
            build_ids=request.build_ids,
        )

    return build_project_model(
        document,
        request.build_ids,
        request.environments_id,
        request.envvars_id,
    )
