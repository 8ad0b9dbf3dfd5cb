"""literate package exports."""

from importlib.metadata import version, PackageNotFoundError

from .builder import build_project_model, expand_environments, extract_commands
from .config import ProjectModelRequest, load_project_model
from .environment import ExecutionEnvironment
from .model import (
    MalformedDocumentError,
    MalformedEnvSpecError,
    ModelNotFoundError,
    ProjectModel,
    ProjectModelBuildingError,
)

__all__ = [
    "__version__",
    "ExecutionEnvironment",
    "MalformedDocumentError",
    "MalformedEnvSpecError",
    "ModelNotFoundError",
    "ProjectModel",
    "ProjectModelBuildingError",
    "ProjectModelRequest",
    "build_project_model",
    "expand_environments",
    "extract_commands",
    "load_project_model",
]

try:
    __version__ = version("literate")
except PackageNotFoundError:  # pragma: no cover - local dev fallback
    __version__ = "0.1.0"
