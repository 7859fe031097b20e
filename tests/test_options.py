from __future__ import annotations

import pytest

from cloudcmd.errors import UsageError
from cloudcmd.options import OptionDefinition, OptionKind, OptionSet


COUNT = OptionDefinition("count", "How many.", kind=OptionKind.INT, default=10)
FLAG = OptionDefinition("flag", "A switch.", kind=OptionKind.BOOL, default=False)
MODE = OptionDefinition("mode", "Speed.", kind=OptionKind.ENUM, choices=("fast", "slow"))
TAG = OptionDefinition("tag", "Repeatable.", kind=OptionKind.LIST)
GROUP = OptionDefinition("resource-group", "Group.", required=True, aliases=("g",))


def _set() -> OptionSet:
    return OptionSet([COUNT, FLAG, MODE, TAG, GROUP])


def test_option_names_must_be_kebab_case() -> None:
    with pytest.raises(ValueError):
        OptionDefinition("Resource_Group", "x")
    with pytest.raises(ValueError):
        OptionDefinition("queue", "x", aliases=("Bad Alias",))


def test_option_default_must_match_kind() -> None:
    with pytest.raises(ValueError):
        OptionDefinition("count", "x", kind=OptionKind.INT, default="3")
    with pytest.raises(ValueError):
        OptionDefinition("mode", "x", kind=OptionKind.ENUM, choices=("a",), default="b")
    with pytest.raises(ValueError):
        OptionDefinition("mode", "x", kind=OptionKind.ENUM)


def test_option_set_rejects_name_and_alias_collisions() -> None:
    with pytest.raises(ValueError):
        OptionSet([OptionDefinition("queue", "x", aliases=("name",)), OptionDefinition("name", "y")])
    options = OptionSet([COUNT])
    with pytest.raises(ValueError):
        options.add(COUNT)


def test_as_required_returns_new_definition() -> None:
    required = GROUP.as_optional().as_required()
    assert required.required is True
    assert GROUP.as_optional().required is False
    assert GROUP.required is True


def test_parse_coerces_each_kind() -> None:
    result = _set().parse(
        ["--count", "5", "--flag", "--mode", "FAST", "--tag", "a", "--tag", "b", "-g", "rg1"],
        command_path="demo",
    )
    assert result.command_path == "demo"
    assert result.get(COUNT) == 5
    assert result.get(FLAG) is True
    assert result.get(MODE) == "fast"
    assert result.get(TAG) == ["a", "b"]
    assert result.get(GROUP) == "rg1"


def test_parse_falls_back_to_defaults() -> None:
    result = _set().parse([], command_path="demo")
    assert result.get(COUNT) == 10
    assert result.get(FLAG) is False
    assert result.get(MODE) is None
    assert result.get(TAG) is None
    assert result.missing_required(_set()) == [GROUP]


def test_blank_string_counts_as_missing() -> None:
    result = _set().parse(["--resource-group", "  "], command_path="demo")
    assert not result.has_value(GROUP)
    assert result.missing_required(_set()) == [GROUP]


@pytest.mark.parametrize(
    "tokens",
    [
        ["--count", "many"],
        ["--mode", "medium"],
        ["--unknown", "x"],
        ["stray"],
    ],
)
def test_parse_rejects_uncoercible_input_as_usage_error(tokens: list[str]) -> None:
    with pytest.raises(UsageError):
        _set().parse(tokens, command_path="demo")


def test_parse_arguments_accepts_name_camel_case_and_alias() -> None:
    options = _set()
    assert options.parse_arguments({"resource-group": "a"}, command_path="x").get(GROUP) == "a"
    assert options.parse_arguments({"resourceGroup": "b"}, command_path="x").get(GROUP) == "b"
    assert options.parse_arguments({"resource_group": "c"}, command_path="x").get(GROUP) == "c"
    assert options.parse_arguments({"g": "d"}, command_path="x").get(GROUP) == "d"


def test_parse_arguments_maps_json_types() -> None:
    result = _set().parse_arguments(
        {"count": 7, "flag": True, "tag": ["x", "y"], "mode": "slow", "resourceGroup": None},
        command_path="x",
    )
    assert result.get(COUNT) == 7
    assert result.get(FLAG) is True
    assert result.get(TAG) == ["x", "y"]
    assert result.get(MODE) == "slow"
    assert result.get(GROUP) is None


def test_tokens_from_arguments_renders_false_flag() -> None:
    assert _set().tokens_from_arguments({"flag": False}) == ["--no-flag"]


@pytest.mark.parametrize(
    "arguments",
    [
        {"resource-group": "a", "g": "b"},
        {"resource-group": "a", "resourceGroup": "b"},
        {"resource_group": "a", "resourceGroup": None},
    ],
)
def test_parse_arguments_rejects_two_keys_for_one_option(arguments: dict) -> None:
    with pytest.raises(UsageError, match="duplicate argument for --resource-group"):
        _set().parse_arguments(arguments, command_path="x")


def test_bool_options_cannot_be_required() -> None:
    with pytest.raises(ValueError, match="cannot be required"):
        OptionDefinition("force", "x", kind=OptionKind.BOOL, required=True)
    with pytest.raises(ValueError):
        FLAG.as_required()


def test_parse_arguments_rejects_unknown_keys_and_bad_shapes() -> None:
    with pytest.raises(UsageError, match="unknown argument"):
        _set().parse_arguments({"colour": "red"}, command_path="x")
    with pytest.raises(UsageError):
        _set().parse_arguments({"flag": "yes"}, command_path="x")
    with pytest.raises(UsageError):
        _set().parse_arguments({"count": {"n": 1}}, command_path="x")


def test_json_schema_lists_required_and_types() -> None:
    schema = _set().json_schema()
    assert schema["required"] == ["resource-group"]
    assert schema["additionalProperties"] is False
    props = schema["properties"]
    assert props["count"] == {"description": "How many.", "type": "integer", "default": 10}
    assert props["mode"]["enum"] == ["fast", "slow"]
    assert props["tag"]["type"] == "array"
    assert props["flag"]["type"] == "boolean"
