from __future__ import annotations

from cloudcmd.catalogue import command_catalogue, render_markdown, tool_name


def test_catalogue_lists_every_leaf_without_executing(runtime, queue_service, appservice_service) -> None:
    entries = command_catalogue(runtime.root)

    assert [e["tool"] for e in entries] == ["queue_list", "queue_details", "queue_purge", "appservice_database_add"]
    assert queue_service.calls == [] and appservice_service.calls == []

    add = entries[3]
    assert add["command"] == "appservice database add"
    assert add["title"] == "Add Database to App Service"
    assert add["metadata"] == {"destructive": False, "readOnly": False}
    options = {o["name"]: o for o in add["options"]}
    assert options["subscription"]["aliases"] == ["sub"]
    assert options["resource-group"]["required"] is True
    assert options["connection-string"]["required"] is False
    assert options["retry-mode"]["choices"] == ["legacy", "standard", "adaptive"]
    assert options["retry-max-retries"]["default"] == 3


def test_catalogue_prefix_matches_whole_segments(runtime) -> None:
    assert len(command_catalogue(runtime.root, prefix="queue")) == 3
    assert len(command_catalogue(runtime.root, prefix="appservice database")) == 1
    assert command_catalogue(runtime.root, prefix="que") == []


def test_tool_name_joins_path() -> None:
    assert tool_name(("appservice", "database", "add")) == "appservice_database_add"


def test_markdown_has_a_section_and_parameter_table_per_command(runtime) -> None:
    text = render_markdown(runtime.root, program="cloudcmd")

    assert text.startswith("# cloudcmd command reference\n")
    assert text.count("**Parameters:**") == 4
    assert "- Destructive: yes" in text
    assert "| `--queue` | yes | string | The queue name. |" in text
    assert "| `--retry-mode` | no | enum (legacy, standard, adaptive) |" in text
