from __future__ import annotations

import io
import json

from cloudcmd.mcp_server import CommandMcp, serve_stdio


def _call(mcp: CommandMcp, name: str, arguments: dict, req_id: int = 7) -> dict:
    resp = mcp.handle_request(
        {"jsonrpc": "2.0", "id": req_id, "method": "tools/call", "params": {"name": name, "arguments": arguments}}
    )
    assert isinstance(resp, dict)
    return resp


def _envelope(resp: dict) -> dict:
    return json.loads(resp["result"]["content"][0]["text"])


def test_initialize_reports_server_name(runtime) -> None:
    resp = CommandMcp(runtime).handle_request({"jsonrpc": "2.0", "id": 1, "method": "initialize"})
    assert resp["result"]["serverInfo"]["name"] == "cloudcmd"
    assert resp["result"]["capabilities"] == {"tools": {}}


def test_tools_list_exposes_every_leaf_with_annotations(runtime) -> None:
    resp = CommandMcp(runtime).handle_request({"jsonrpc": "2.0", "id": 1, "method": "tools/list"})
    tools = {t["name"]: t for t in resp["result"]["tools"]}

    assert set(tools) == {"queue_list", "queue_details", "queue_purge", "appservice_database_add"}
    assert tools["queue_purge"]["annotations"] == {
        "title": "Purge Queue",
        "readOnlyHint": False,
        "destructiveHint": True,
    }
    assert tools["queue_details"]["annotations"]["readOnlyHint"] is True
    schema = tools["queue_details"]["inputSchema"]
    assert set(schema["required"]) == {"subscription", "resource-group", "queue"}
    assert schema["properties"]["retry-mode"]["enum"] == ["legacy", "standard", "adaptive"]


def test_tools_call_returns_envelope_text(runtime, queue_service, queue_details) -> None:
    queue_service.details = queue_details
    resp = _call(CommandMcp(runtime), "queue_details", {"subscription": "sub1", "resource-group": "rg1", "queue": "q1"})

    assert resp["id"] == 7
    assert resp["result"]["isError"] is False
    envelope = _envelope(resp)
    assert envelope["status"] == 200
    assert envelope["results"]["queueDetails"]["name"] == "q1"


def test_tools_call_failure_sets_is_error(runtime, queue_service) -> None:
    resp = _call(CommandMcp(runtime), "queue_details", {"subscription": "sub1"})

    assert resp["result"]["isError"] is True
    envelope = _envelope(resp)
    assert envelope["status"] == 400
    assert envelope["results"] is None
    assert queue_service.calls == []


def test_usage_errors_map_to_invalid_params(runtime) -> None:
    mcp = CommandMcp(runtime)
    resp = _call(mcp, "queue_list", {"subscription": "sub1", "colour": "red"})
    assert resp["error"]["code"] == -32602
    assert "unknown argument(s): colour" in resp["error"]["message"]

    resp = _call(mcp, "queue_list", {"subscription": "sub1", "maxResults": "lots"})
    assert resp["error"]["code"] == -32602

    resp = _call(mcp, "queue_nope", {})
    assert resp["error"] == {"code": -32602, "message": "unknown tool: queue_nope"}


def test_unknown_methods_and_notifications(runtime) -> None:
    mcp = CommandMcp(runtime)
    assert mcp.handle_request({"jsonrpc": "2.0", "method": "notifications/initialized"}) is None
    assert mcp.handle_request({"jsonrpc": "2.0", "method": "whatever"}) is None
    resp = mcp.handle_request({"jsonrpc": "2.0", "id": 3, "method": "resources/list"})
    assert resp["error"]["code"] == -32601


def test_serve_stdio_answers_each_line(runtime) -> None:
    stdin = io.BytesIO(
        b'{"jsonrpc":"2.0","id":1,"method":"tools/list"}\n'
        b"\n"
        b"not json\n"
        b'{"jsonrpc":"2.0","method":"notifications/initialized"}\n'
        b'{"jsonrpc":"2.0","id":2,"method":"initialize"}\n'
    )
    stdout = io.BytesIO()

    assert serve_stdio(runtime, stdin=stdin, stdout=stdout) == 0

    lines = [json.loads(line) for line in stdout.getvalue().splitlines()]
    assert [line.get("id") for line in lines] == [1, None, 2]
    assert len(lines[0]["result"]["tools"]) == 4
    assert lines[1]["error"]["code"] == -32700
    assert lines[2]["result"]["protocolVersion"] == "2024-11-05"
