from __future__ import annotations

import pytest

from literate.builder import (
    build_project_model,
    consume_env_section,
    expand_environments,
    extract_commands,
    parse_env_assignments,
)
from literate.environment import ExecutionEnvironment
from literate.model import MalformedDocumentError, MalformedEnvSpecError


def labels_of(environments: list[ExecutionEnvironment]) -> list[tuple[str, ...]]:
    return [environment.labels for environment in environments]


def build(document: object, build_ids=("build",)):
    return build_project_model(document, build_ids, "environments", "env")


# ---------------------------------------------------------------------
# Environment variables
# ---------------------------------------------------------------------

def test_parse_env_assignments() -> None:
    assert parse_env_assignments("A=1 B=2") == {"A": "1", "B": "2"}


def test_env_value_keeps_later_equals_signs() -> None:
    assert parse_env_assignments("OPTS=-Dx=y") == {"OPTS": "-Dx=y"}


def test_env_token_without_equals_is_rejected() -> None:
    with pytest.raises(MalformedEnvSpecError):
        parse_env_assignments("A=1 B")


def test_env_section_string() -> None:
    assert consume_env_section({"env": "A=1  B=2"}, "env") == {"A": "1", "B": "2"}


def test_env_section_global_mapping() -> None:
    document = {"env": {"global": ["A=1 B=2", "B=3"], "matrix": ["C=4"]}}

    assert consume_env_section(document, "env") == {"A": "1", "B": "3"}


def test_env_section_global_string() -> None:
    assert consume_env_section({"env": {"global": "A=1"}}, "env") == {"A": "1"}


def test_env_section_sequence_last_write_wins() -> None:
    assert consume_env_section({"env": ["A=1", "A=2 B=1"]}, "env") == {"A": "2", "B": "1"}


def test_env_section_sequence_requires_strings() -> None:
    with pytest.raises(MalformedEnvSpecError):
        consume_env_section({"env": ["A=1", ["B=2"]]}, "env")


@pytest.mark.parametrize("document", [{}, {"env": None}, {"env": {"matrix": "A=1"}}])
def test_env_section_absent_or_unrecognised(document: dict) -> None:
    assert consume_env_section(document, "env") == {}


# ---------------------------------------------------------------------
# Environment matrix
# ---------------------------------------------------------------------

def test_absent_section_is_default_environment() -> None:
    assert labels_of(expand_environments(None)) == [()]


def test_string_section_is_single_label() -> None:
    assert labels_of(expand_environments("linux")) == [("linux",)]


def test_top_level_flat_list_is_one_environment() -> None:
    assert labels_of(expand_environments(["linux", "jdk8"])) == [("linux", "jdk8")]


def test_list_of_lists_is_alternatives() -> None:
    result = expand_environments([["a", "b"], ["c"]])

    assert labels_of(result) == [("a", "b"), ("c",)]


def test_mixed_top_level_list_is_alternatives() -> None:
    result = expand_environments(["a", ["b", "c"], {"ignored": "x"}])

    assert labels_of(result) == [("a",), ("b", "c")]


def test_nested_list_labels_are_not_expanded_again() -> None:
    result = expand_environments([["a", ["b"]], "c"])

    assert labels_of(result) == [("a",), ("c",)]


def test_mapping_prepends_key_to_nested_alternatives() -> None:
    result = expand_environments({"x": ["a", "b"]})

    assert labels_of(result) == [("x", "a"), ("x", "b")]


def test_nested_mappings_add_one_label_per_level() -> None:
    document = {"linux": {"jdk": ["7", "8"]}, "windows": "jdk8"}

    assert labels_of(expand_environments(document)) == [
        ("linux", "jdk", "7"),
        ("linux", "jdk", "8"),
        ("windows", "jdk8"),
    ]


def test_mapping_with_absent_value_yields_key_only() -> None:
    assert labels_of(expand_environments({"linux": None})) == [("linux",)]


def test_empty_mapping_yields_no_environment() -> None:
    assert expand_environments({}) == []


def test_empty_list_yields_default_environment() -> None:
    assert labels_of(expand_environments([])) == [()]


def test_empty_list_below_top_level_yields_nothing() -> None:
    assert expand_environments({"x": []}) == []


def test_expansion_is_repeatable() -> None:
    document = {"x": ["a", ["b", "c"]], "y": "d"}

    assert expand_environments(document) == expand_environments(document)


# ---------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------

@pytest.mark.parametrize(
    "environment",
    [None, ExecutionEnvironment.any(), ExecutionEnvironment(), ExecutionEnvironment(["x"])],
)
def test_string_is_single_command(environment) -> None:
    assert extract_commands("make", environment) == ["make"]


def test_list_is_flattened_in_order() -> None:
    assert extract_commands(["a", ["b", "c"], "d"]) == ["a", "b", "c", "d"]


def test_mapping_selects_matching_labels_in_document_order() -> None:
    value = {"windows": "nmake", "linux": ["./configure", "make"], "jdk8": "mvn"}
    environment = ExecutionEnvironment(["jdk8", "linux"])

    assert extract_commands(value, environment) == ["./configure", "make", "mvn"]


def test_mapping_without_matching_label_is_dropped() -> None:
    assert extract_commands({"linux": "make"}, ExecutionEnvironment(["windows"])) == []


@pytest.mark.parametrize("environment", [None, ExecutionEnvironment.any()])
def test_mapping_without_environment_is_dropped(environment) -> None:
    assert extract_commands(["a", {"linux": "make"}], environment) == ["a"]


@pytest.mark.parametrize("value", [None, 1, True])
def test_unrecognised_values_are_dropped(value) -> None:
    assert extract_commands(value, ExecutionEnvironment(["x"])) == []


# ---------------------------------------------------------------------
# Assembly
# ---------------------------------------------------------------------

def test_platform_specific_build_commands() -> None:
    model = build(
        {
            "environments": [["linux"], ["windows"]],
            "build": {"linux": "make", "windows": "nmake"},
        }
    )
    linux = ExecutionEnvironment(["linux"])
    windows = ExecutionEnvironment(["windows"])

    assert list(model.environments) == [linux, windows]
    assert dict(model.build) == {linux: ("make",), windows: ("nmake",)}


def test_flat_environment_list_builds_one_combined_environment() -> None:
    model = build(
        {
            "environments": ["linux", "windows"],
            "build": {"linux": "make", "windows": "nmake"},
        }
    )
    combined = ExecutionEnvironment(["linux", "windows"])

    assert list(model.environments) == [combined]
    assert model.build[combined] == ("make", "nmake")


def test_default_environment_and_tasks() -> None:
    model = build({"build": "echo hi", "deploy": "echo bye"})
    default = ExecutionEnvironment()

    assert list(model.environments) == [default]
    assert dict(model.build) == {default: ("echo hi",)}
    assert dict(model.tasks) == {"deploy": ("echo bye",)}


def test_unmatched_environment_gets_empty_command_list() -> None:
    model = build({"environments": "windows", "build": {"linux": "make"}})

    assert dict(model.build) == {ExecutionEnvironment(["windows"]): ()}


def test_variables_are_attached_to_every_environment() -> None:
    model = build({"environments": [["a"], ["b"]], "env": "A=1 B=2"})

    assert len(model.environments) == 2
    for environment in model.environments:
        assert dict(environment.variables) == {"A": "1", "B": "2"}
    assert set(model.build) == set(model.environments)


def test_build_ids_accumulate_in_declaration_order() -> None:
    document = {
        "install": "pip install .",
        "script": ["pytest", {"linux": "make docs"}],
        "environments": "linux",
    }
    model = build(document, build_ids=("install", "script"))

    assert model.build[ExecutionEnvironment(["linux"])] == (
        "pip install .",
        "pytest",
        "make docs",
    )


def test_unsorted_build_ids_are_not_classified_as_tasks() -> None:
    document = {"script": "pytest", "install": "pip install .", "notify": "echo done"}
    model = build(document, build_ids=("script", "install"))

    assert model.build[ExecutionEnvironment()] == ("pytest", "pip install .")
    assert set(model.tasks) == {"notify"}


def test_missing_build_id_is_skipped() -> None:
    model = build({"deploy": "echo bye"}, build_ids=("build", "script"))

    assert dict(model.build) == {ExecutionEnvironment(): ()}


def test_every_other_key_becomes_a_task_with_wildcard_commands() -> None:
    document = {
        "environments": ["linux"],
        "build": "make",
        "deploy": ["echo a", {"linux": "echo linux"}],
        "env": "A=1",
    }
    model = build(document)

    assert dict(model.tasks) == {
        "environments": ("linux",),
        "deploy": ("echo a",),
        "env": ("A=1",),
    }


def test_equal_environments_are_folded_once() -> None:
    model = build({"environments": [["a", "b"], ["b", "a"]], "build": "make"})

    assert len(model.environments) == 2
    assert dict(model.build) == {ExecutionEnvironment(["a", "b"]): ("make",)}


@pytest.mark.parametrize("document", [["build"], "build: make", None])
def test_non_mapping_document_is_rejected(document: object) -> None:
    with pytest.raises(MalformedDocumentError):
        build(document)


def test_malformed_env_aborts_model_building() -> None:
    with pytest.raises(MalformedEnvSpecError):
        build({"env": "NOT_AN_ASSIGNMENT", "build": "make"})
