from __future__ import annotations

import re
from typing import Iterator, Sequence, Union

from .commands import Command

_SEGMENT_SPLIT = re.compile(r"[.\s/]+")


def split_path(path: str | Sequence[str]) -> tuple[str, ...]:
    if isinstance(path, str):
        return tuple(p for p in _SEGMENT_SPLIT.split(path.strip()) if p)
    out: list[str] = []
    for part in path:
        out.extend(split_path(str(part)))
    return tuple(out)


class CommandGroup:
    """Named interior node of the command tree.

    Sibling names are unique across child groups and child commands. Groups
    are built once at startup and only read afterwards.
    """

    def __init__(self, name: str, description: str = "") -> None:
        if not name or split_path(name) != (name,):
            raise ValueError(f"invalid group name: {name!r}")
        self.name = name
        self.description = description
        self.parent: CommandGroup | None = None
        self.sub_groups: dict[str, CommandGroup] = {}
        self.commands: dict[str, Command] = {}

    def __repr__(self) -> str:
        return f"CommandGroup({self.name!r}, groups={list(self.sub_groups)}, commands={list(self.commands)})"

    def _check_sibling_name(self, name: str) -> None:
        if name in self.sub_groups or name in self.commands:
            raise ValueError(f"duplicate name {name!r} under group {self.name!r}")

    def _ancestors(self) -> Iterator[CommandGroup]:
        node: CommandGroup | None = self
        while node is not None:
            yield node
            node = node.parent

    def add_sub_group(self, group: CommandGroup) -> CommandGroup:
        self._check_sibling_name(group.name)
        if group.parent is not None:
            raise ValueError(f"group {group.name!r} already belongs to {group.parent.name!r}")
        if any(a is group for a in self._ancestors()):
            raise ValueError(f"adding group {group.name!r} under {self.name!r} would create a cycle")
        group.parent = self
        self.sub_groups[group.name] = group
        return group

    def add_command(self, name: str, command: Command) -> None:
        if not name or split_path(name) != (name,):
            raise ValueError(f"invalid command name: {name!r}")
        self._check_sibling_name(name)
        self.commands[name] = command

    def path(self) -> tuple[str, ...]:
        # The root group is not part of any command path.
        names = [g.name for g in self._ancestors() if g.parent is not None]
        return tuple(reversed(names))

    def resolve(self, path: str | Sequence[str]) -> Union[CommandGroup, Command, None]:
        segments = split_path(path)
        node: CommandGroup = self
        for i, segment in enumerate(segments):
            group = node.sub_groups.get(segment)
            if group is not None:
                node = group
                continue
            command = node.commands.get(segment)
            if command is not None and i == len(segments) - 1:
                return command
            return None
        return node

    def iter_commands(self, prefix: tuple[str, ...] = ()) -> Iterator[tuple[tuple[str, ...], Command]]:
        for name, command in self.commands.items():
            yield prefix + (name,), command
        for name, group in self.sub_groups.items():
            yield from group.iter_commands(prefix + (name,))

    def iter_groups(self) -> Iterator[CommandGroup]:
        for group in self.sub_groups.values():
            yield group
            yield from group.iter_groups()

    def validate_tree(self) -> None:
        """Fail fast when a command object is registered under two paths."""
        seen: dict[int, tuple[str, ...]] = {}
        for path, command in self.iter_commands():
            first = seen.get(id(command))
            if first is not None:
                raise ValueError(
                    f"command registered twice: {' '.join(first)!r} and {' '.join(path)!r}"
                )
            seen[id(command)] = path
