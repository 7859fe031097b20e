from __future__ import annotations

import asyncio
import json
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

import click
import typer

from . import __version__
from .catalogue import command_catalogue, render_markdown
from .commands import Command, build_option_set, command_help
from .config import Settings, bootstrap_env
from .dispatch import Dispatcher, Runtime, build_runtime
from .errors import OpError, UsageError
from .groups import CommandGroup
from .logs import configure_logging, rich_error
from .mcp_server import serve_stdio
from .response import exit_code_for

PROG_NAME = "cloudcmd"

app = typer.Typer(
    name=PROG_NAME,
    help="Cloud operations as commands and tools.",
    no_args_is_help=True,
    add_completion=False,
)


@dataclass(frozen=True)
class CliState:
    runtime: Runtime
    pretty: bool


def _print_json(obj: Any, *, pretty: bool) -> None:
    if pretty:
        sys.stdout.write(json.dumps(obj, indent=2, sort_keys=True) + "\n")
    else:
        sys.stdout.write(json.dumps(obj, separators=(",", ":"), sort_keys=True) + "\n")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"{PROG_NAME} {__version__}")
        raise typer.Exit(code=0)


def _state(ctx: click.Context) -> CliState:
    state = ctx.find_object(CliState)
    if state is None:
        raise OpError("cli state not initialized")
    return state


@app.callback()
def app_callback(
    ctx: typer.Context,
    log_level: str = typer.Option("", "--log-level", help="Log level for stderr diagnostics (e.g. DEBUG)"),
    plain_json: bool = typer.Option(False, "--plain-json", help="Emit compact JSON output"),
    version: bool = typer.Option(False, "--version", callback=_version_callback, is_eager=True),
) -> None:
    del version
    runtime = ctx.find_object(Runtime)
    if runtime is None:
        raise OpError("runtime not initialized")
    if log_level:
        configure_logging(log_level)
    ctx.obj = CliState(runtime=runtime, pretty=not (plain_json or runtime.settings.plain_json))


@app.command("list", help="List commands with their options and safety metadata.")
def list_commands(
    ctx: typer.Context,
    prefix: str = typer.Argument("", help="Only commands under this path (e.g. 'queue')"),
) -> None:
    state = _state(ctx)
    path = " ".join(prefix.replace(".", " ").split())
    _print_json({"commands": command_catalogue(state.runtime.root, prefix=path)}, pretty=state.pretty)


@app.command("call", help="Invoke a command by path with JSON arguments.")
def call(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="Command path, e.g. 'queue.details' or 'queue details'"),
    args_json: str = typer.Option("{}", "--args-json", help="JSON object of option values"),
) -> int:
    state = _state(ctx)
    try:
        arguments = json.loads(args_json)
    except ValueError as e:
        raise UsageError(f"invalid --args-json: {e}") from e
    if not isinstance(arguments, dict):
        raise UsageError("--args-json must decode to an object")
    response = asyncio.run(Dispatcher(state.runtime).invoke_arguments(path, arguments))
    _print_json(response.to_dict(), pretty=state.pretty)
    return exit_code_for(response.status)


@app.command("docs", help="Render the command reference as Markdown.")
def docs(
    ctx: typer.Context,
    output: str = typer.Option("", "--output", help="Write to this file instead of stdout"),
) -> None:
    state = _state(ctx)
    text = render_markdown(state.runtime.root, program=PROG_NAME)
    if not output:
        sys.stdout.write(text)
        return
    try:
        Path(output).write_text(text, encoding="utf-8")
    except OSError as e:
        raise OpError(f"failed to write {output}: {e}") from e


@app.command("serve", help="Serve every command as a tool over stdio JSON-RPC.")
def serve(ctx: typer.Context) -> int:
    return serve_stdio(_state(ctx).runtime)


def _command_callback(path: tuple[str, ...], command: Command, options: Any) -> Callable[..., int]:
    def callback(**params: Any) -> int:
        state = _state(click.get_current_context())
        parse_result = options.parse_params(params, command_path=" ".join(path))
        response = asyncio.run(Dispatcher(state.runtime).execute(command, parse_result))
        _print_json(response.to_dict(), pretty=state.pretty)
        return exit_code_for(response.status)

    return callback


def _click_group(group: CommandGroup, prefix: tuple[str, ...]) -> click.Group:
    out = click.Group(group.name, help=group.description, no_args_is_help=True)
    for name, command in group.commands.items():
        path = prefix + (name,)
        options = build_option_set(command)
        out.add_command(
            options.to_click_command(
                name,
                help=command_help(command),
                short_help=command.title,
                callback=_command_callback(path, command, options),
            )
        )
    for name, sub in group.sub_groups.items():
        out.add_command(_click_group(sub, prefix + (name,)))
    return out


def build_cli(runtime: Runtime) -> click.Group:
    group = typer.main.get_command(app)
    if not isinstance(group, click.Group):
        raise OpError("cli app did not produce a command group")
    if runtime.root.commands:
        raise ValueError(f"commands must be registered under a group: {sorted(runtime.root.commands)}")
    for name, sub in runtime.root.sub_groups.items():
        if name in group.commands:
            raise ValueError(f"command group {name!r} collides with a built-in command")
        group.add_command(_click_group(sub, (name,)))
    return group


def main(argv: list[str] | None = None, runtime: Runtime | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    try:
        bootstrap_env()
        if runtime is None:
            settings = Settings.from_env()
            configure_logging(settings.log_level)
            runtime = build_runtime(settings)
        group = build_cli(runtime)
        result = group.main(args=argv, prog_name=PROG_NAME, standalone_mode=False, obj=runtime)
        if result is None:
            return 0
        return int(result)
    except typer.Exit as e:
        return int(e.exit_code)
    except click.ClickException as e:
        rich_error(e.format_message())
        return int(e.exit_code)
    except UsageError as e:
        rich_error(str(e))
        return 2
    except OpError as e:
        rich_error(str(e))
        return 1


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
