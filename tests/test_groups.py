from __future__ import annotations

import pytest

from cloudcmd.commands import BaseCommand, ToolMetadata
from cloudcmd.groups import CommandGroup, split_path


class _Noop(BaseCommand):
    title = "Noop"
    description = "Does nothing."
    metadata = ToolMetadata(destructive=False, read_only=True)

    def bind_options(self, parse_result):
        return None

    async def run(self, context, options):
        return None


def _tree() -> tuple[CommandGroup, _Noop]:
    root = CommandGroup("root")
    storage = root.add_sub_group(CommandGroup("storage", "Storage."))
    container = storage.add_sub_group(CommandGroup("container", "Containers."))
    leaf = _Noop()
    container.add_command("list", leaf)
    return root, leaf


def test_split_path_accepts_dots_spaces_and_sequences() -> None:
    assert split_path("storage.container.list") == ("storage", "container", "list")
    assert split_path(" storage  container list ") == ("storage", "container", "list")
    assert split_path(["storage", "container.list"]) == ("storage", "container", "list")
    assert split_path("") == ()


def test_resolve_walks_the_tree() -> None:
    root, leaf = _tree()
    assert root.resolve("storage.container.list") is leaf
    assert root.resolve(("storage", "container", "list")) is leaf
    assert isinstance(root.resolve("storage"), CommandGroup)
    assert root.resolve("storage.container").name == "container"
    assert root.resolve("storage.blob") is None
    assert root.resolve("storage.container.list.extra") is None
    assert root.resolve("") is root


def test_sibling_names_are_unique_across_groups_and_commands() -> None:
    root, _ = _tree()
    storage = root.sub_groups["storage"]
    with pytest.raises(ValueError, match="duplicate name"):
        storage.add_command("container", _Noop())
    with pytest.raises(ValueError, match="duplicate name"):
        storage.add_sub_group(CommandGroup("container"))


def test_tree_rejects_cycles_and_second_parents() -> None:
    root, _ = _tree()
    storage = root.sub_groups["storage"]
    with pytest.raises(ValueError, match="already belongs"):
        CommandGroup("other").add_sub_group(storage)
    with pytest.raises(ValueError, match="cycle"):
        storage.sub_groups["container"].add_sub_group(root)


def test_invalid_names_are_rejected() -> None:
    with pytest.raises(ValueError):
        CommandGroup("two words")
    with pytest.raises(ValueError):
        CommandGroup("root").add_command("a.b", _Noop())


def test_path_excludes_root() -> None:
    root, _ = _tree()
    assert root.path() == ()
    assert root.resolve("storage.container").path() == ("storage", "container")


def test_iter_commands_and_groups_enumerate_without_executing() -> None:
    root, leaf = _tree()
    assert list(root.iter_commands()) == [(("storage", "container", "list"), leaf)]
    assert [g.name for g in root.iter_groups()] == ["storage", "container"]


def test_validate_tree_detects_shared_command_objects() -> None:
    root, leaf = _tree()
    root.validate_tree()
    root.sub_groups["storage"].add_command("again", leaf)
    with pytest.raises(ValueError, match="registered twice"):
        root.validate_tree()
