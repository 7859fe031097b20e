from __future__ import annotations

from typing import Any

from .commands import build_option_set, command_help
from .groups import CommandGroup
from .options import OptionDefinition


def tool_name(path: tuple[str, ...]) -> str:
    return "_".join(path)


def _option_entry(d: OptionDefinition) -> dict[str, Any]:
    entry: dict[str, Any] = {
        "name": d.name,
        "kind": d.kind.value,
        "required": d.required,
        "description": d.description,
    }
    if d.aliases:
        entry["aliases"] = list(d.aliases)
    if d.choices:
        entry["choices"] = list(d.choices)
    if d.default is not None:
        entry["default"] = list(d.default) if isinstance(d.default, tuple) else d.default
    return entry


def command_catalogue(root: CommandGroup, *, prefix: str = "") -> list[dict[str, Any]]:
    entries: list[dict[str, Any]] = []
    for path, command in root.iter_commands():
        command_path = " ".join(path)
        if prefix and not (command_path == prefix or command_path.startswith(prefix + " ")):
            continue
        options = build_option_set(command)
        entries.append(
            {
                "command": command_path,
                "tool": tool_name(path),
                "name": command.name,
                "title": command.title,
                "description": command_help(command),
                "metadata": command.metadata.to_dict(),
                "options": [_option_entry(d) for d in options],
            }
        )
    return entries


def render_markdown(root: CommandGroup, *, program: str = "cloudcmd") -> str:
    lines: list[str] = [f"# {program} command reference", ""]
    for entry in command_catalogue(root):
        meta = entry["metadata"]
        lines.append(f"## {program} {entry['command']}")
        lines.append("")
        lines.append(f"**{entry['title']}**")
        lines.append("")
        lines.append(entry["description"])
        lines.append("")
        lines.append(f"- Tool: `{entry['tool']}`")
        lines.append(f"- Read-only: {'yes' if meta['readOnly'] else 'no'}")
        lines.append(f"- Destructive: {'yes' if meta['destructive'] else 'no'}")
        lines.append("")
        lines.append("**Parameters:**")
        lines.append("")
        lines.append("| Option | Required | Kind | Description |")
        lines.append("|---|---|---|---|")
        for opt in entry["options"]:
            kind = opt["kind"]
            if opt.get("choices"):
                kind = f"{kind} ({', '.join(opt['choices'])})"
            desc = opt["description"]
            if "default" in opt:
                desc = f"{desc} Default: `{opt['default']}`."
            lines.append(
                f"| `--{opt['name']}` | {'yes' if opt['required'] else 'no'} | {kind} | {desc} |"
            )
        lines.append("")
    return "\n".join(lines).rstrip() + "\n"
