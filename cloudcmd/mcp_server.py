from __future__ import annotations

import asyncio
import json
import logging
import sys
from dataclasses import dataclass
from typing import Any

from . import __version__
from .catalogue import tool_name
from .commands import Command, build_option_set, command_help
from .dispatch import Dispatcher, Runtime
from .errors import OpError, UsageError
from .response import is_success

logger = logging.getLogger(__name__)

PROTOCOL_VERSION = "2024-11-05"


@dataclass
class ToolDef:
    name: str
    path: tuple[str, ...]
    command: Command
    input_schema: dict[str, Any]

    def describe(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": command_help(self.command),
            "inputSchema": self.input_schema,
            "annotations": {
                "title": self.command.title,
                "readOnlyHint": self.command.metadata.read_only,
                "destructiveHint": self.command.metadata.destructive,
            },
        }


class CommandMcp:
    """JSON-RPC tool server exposing one tool per leaf of the command tree."""

    def __init__(self, runtime: Runtime) -> None:
        self.runtime = runtime
        self.dispatcher = Dispatcher(runtime)
        self.tools: dict[str, ToolDef] = {}
        for path, command in runtime.root.iter_commands():
            self._register(
                ToolDef(
                    name=tool_name(path),
                    path=path,
                    command=command,
                    input_schema=build_option_set(command).json_schema(),
                )
            )

    def _register(self, tool: ToolDef) -> None:
        if tool.name in self.tools:
            raise ValueError(f"duplicate tool name: {tool.name}")
        self.tools[tool.name] = tool

    def call_tool(self, tool: ToolDef, arguments: dict[str, Any]) -> dict[str, Any]:
        response = asyncio.run(self.dispatcher.invoke_arguments(tool.path, arguments))
        return {
            "content": [
                {
                    "type": "text",
                    "text": json.dumps(response.to_dict(), separators=(",", ":"), sort_keys=True),
                }
            ],
            "isError": not is_success(response.status),
        }

    def handle_request(self, req: dict[str, Any]) -> dict[str, Any] | None:
        method = req.get("method")
        req_id = req.get("id")

        if method in ("initialized", "notifications/initialized") and req_id is None:
            return None

        if method == "initialize":
            return {
                "jsonrpc": "2.0",
                "id": req_id,
                "result": {
                    "protocolVersion": PROTOCOL_VERSION,
                    "capabilities": {"tools": {}},
                    "serverInfo": {"name": self.runtime.settings.server_name, "version": __version__},
                },
            }

        if method == "tools/list":
            tools = [t.describe() for t in self.tools.values()]
            return {"jsonrpc": "2.0", "id": req_id, "result": {"tools": tools}}

        if method == "tools/call":
            params = req.get("params") if isinstance(req.get("params"), dict) else {}
            name = str(params.get("name") or "").strip()
            arguments = params.get("arguments")
            if not isinstance(arguments, dict):
                arguments = {}

            tool = self.tools.get(name)
            if tool is None:
                return self._error(req_id, -32602, f"unknown tool: {name}")

            try:
                result = self.call_tool(tool, arguments)
            except UsageError as e:
                return self._error(req_id, -32602, str(e), data={"tool": name})
            except OpError as e:
                return self._error(req_id, -32001, str(e), data={"tool": name})
            return {"jsonrpc": "2.0", "id": req_id, "result": result}

        if req_id is None:
            return None
        return self._error(req_id, -32601, f"method not found: {method}")

    @staticmethod
    def _error(
        req_id: Any,
        code: int,
        message: str,
        data: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "jsonrpc": "2.0",
            "id": req_id,
            "error": {"code": code, "message": message},
        }
        if isinstance(data, dict):
            payload["error"]["data"] = data
        return payload


def _read_message(stdin: Any) -> dict[str, Any] | None:
    while True:
        line = stdin.readline()
        if not line:
            return None
        if line in (b"\r\n", b"\n"):
            continue
        decoded = line.decode("utf-8").strip()
        if not decoded:
            continue
        parsed = json.loads(decoded)
        break
    if not isinstance(parsed, dict):
        raise ValueError("message must be a JSON object")
    return parsed


def _write_message(stdout: Any, payload: dict[str, Any]) -> None:
    body = json.dumps(payload, separators=(",", ":")).encode("utf-8")
    stdout.write(body + b"\n")
    stdout.flush()


def serve_stdio(runtime: Runtime, *, stdin: Any = None, stdout: Any = None) -> int:
    server = CommandMcp(runtime)
    stdin = stdin if stdin is not None else sys.stdin.buffer
    stdout = stdout if stdout is not None else sys.stdout.buffer
    logger.info("serving %d tools on stdio", len(server.tools))

    while True:
        try:
            req = _read_message(stdin)
        except ValueError as exc:
            # json.JSONDecodeError and UnicodeDecodeError are both ValueErrors.
            _write_message(
                stdout,
                {
                    "jsonrpc": "2.0",
                    "id": None,
                    "error": {"code": -32700, "message": "Parse error", "data": {"detail": str(exc)}},
                },
            )
            continue
        if req is None:
            break
        resp = server.handle_request(req)
        if resp is not None:
            _write_message(stdout, resp)
    return 0
