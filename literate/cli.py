"""Command line entry point for literate."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from .config import (
    DEFAULT_BASENAME,
    DEFAULT_BUILD_ID,
    DEFAULT_ENVIRONMENTS_ID,
    DEFAULT_ENVVARS_ID,
    ProjectModelRequest,
    load_project_model,
)
from .model import ProjectModel, ProjectModelBuildingError
from .plugins import LanguageRegistry
from .repository import FileSystemRepository


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "workspace",
        nargs="?",
        default=".",
        help="Project directory containing the build document (default: current directory)",
    )
    parser.add_argument(
        "--basename",
        default=DEFAULT_BASENAME,
        help=f"Marker file base name, read as .<basename>.yml (default: {DEFAULT_BASENAME})",
    )
    parser.add_argument(
        "--build-id",
        default=DEFAULT_BUILD_ID,
        help=f"Comma or space separated build section keys (default: {DEFAULT_BUILD_ID})",
    )
    parser.add_argument(
        "--environments-id",
        default=DEFAULT_ENVIRONMENTS_ID,
        help=f"Key of the environments section (default: {DEFAULT_ENVIRONMENTS_ID})",
    )
    parser.add_argument(
        "--envvars-id",
        default=DEFAULT_ENVVARS_ID,
        help=f"Key of the environment variables section (default: {DEFAULT_ENVVARS_ID})",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )


def build_show_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="literate",
        description="Compile a literate build document into its build matrix and tasks.",
    )
    _add_common_arguments(parser)
    parser.add_argument(
        "--format",
        choices=("text", "json"),
        default="text",
        help="Output format (default: text)",
    )
    return parser


def build_view_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="literate view",
        description="Browse the build matrix and tasks in a terminal UI.",
    )
    _add_common_arguments(parser)
    return parser


def format_model(model: ProjectModel) -> str:
    """Render the model as indented plain text."""
    lines = ["Environments:"]
    for environment in model.environments:
        lines.append(f"  {environment.name}")
        for key, value in environment.variables.items():
            lines.append(f"    {key}={value}")
        for command in model.commands_for(environment):
            lines.append(f"    $ {command}")
    if model.tasks:
        lines.append("Tasks:")
        for name, commands in model.tasks.items():
            lines.append(f"  {name}")
            for command in commands:
                lines.append(f"    $ {command}")
    return "\n".join(lines)


def _request_from_args(args: argparse.Namespace) -> ProjectModelRequest:
    return ProjectModelRequest(
        basename=args.basename,
        build_id=args.build_id,
        environments_id=args.environments_id,
        envvars_id=args.envvars_id,
    )


def _load_registry() -> LanguageRegistry:
    registry = LanguageRegistry()
    registry.discover()
    for message in registry.consume_messages():
        if message.level != "info":
            print(f"{message.source}: {message.text}", file=sys.stderr)
    return registry


def main(argv: list[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    view = bool(argv) and argv[0] == "view"
    if view:
        args = build_view_parser().parse_args(argv[1:])
    else:
        args = build_show_parser().parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    workspace = Path(args.workspace).expanduser().resolve()
    request = _request_from_args(args)
    registry = _load_registry()
    try:
        model = load_project_model(FileSystemRepository(workspace), request, registry)
    except (ProjectModelBuildingError, ValueError) as error:
        print(f"{workspace}: {error}", file=sys.stderr)
        return 1

    if view:
        from .app import ModelBrowserApp

        app = ModelBrowserApp(workspace, model, request=request, registry=registry)
        app.run()
        return 0

    if args.format == "json":
        print(json.dumps(model.to_dict(), indent=2))
    else:
        print(format_model(model))
    return 0


if __name__ == "__main__":
    sys.exit(main())
