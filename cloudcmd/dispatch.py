"""Startup wiring and the invocation interface shared by the CLI and the tool server."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Protocol, Sequence

from .classifier import DEFAULT_CLASSIFIER, TROUBLESHOOTING_STEPS
from .commands import Command, build_option_set
from .config import Settings
from .context import Activity, CommandContext, ServiceRegistry
from .errors import UsageError
from .groups import CommandGroup, split_path
from .options import ParseResult
from .response import CommandResponse

logger = logging.getLogger(__name__)

ROOT_GROUP_NAME = "cloudcmd"


class AreaSetup(Protocol):
    name: str

    def configure_services(self, services: ServiceRegistry, settings: Settings) -> None: ...

    def register_commands(self, root: CommandGroup) -> None: ...


@dataclass(frozen=True)
class Runtime:
    settings: Settings
    root: CommandGroup
    services: ServiceRegistry


def default_areas() -> list[AreaSetup]:
    from .areas import all_areas

    return all_areas()


def build_runtime(
    settings: Settings | None = None,
    *,
    areas: Iterable[AreaSetup] | None = None,
    services: ServiceRegistry | None = None,
) -> Runtime:
    """Build the command tree and service registry once, at process start.

    Services already present in ``services`` win over the ones an area would
    register, which is how tests substitute domain services.
    """
    settings = settings or Settings.from_env()
    services = services if services is not None else ServiceRegistry()
    services.try_add_singleton(Settings, settings)
    root = CommandGroup(ROOT_GROUP_NAME, "Cloud operations.")
    for area in default_areas() if areas is None else areas:
        area.configure_services(services, settings)
        area.register_commands(root)
        logger.debug("registered area %s", area.name)
    root.validate_tree()
    return Runtime(settings=settings, root=root, services=services)


class Dispatcher:
    def __init__(self, runtime: Runtime) -> None:
        self.runtime = runtime

    def resolve(self, path: str | Sequence[str]) -> tuple[tuple[str, ...], Command]:
        segments = split_path(path)
        found = self.runtime.root.resolve(segments) if segments else None
        if isinstance(found, CommandGroup):
            choices = sorted([*found.sub_groups, *found.commands])
            raise UsageError(
                f"{' '.join(segments)!r} is a command group; choose one of: {', '.join(choices)}"
            )
        if found is None:
            raise UsageError(f"unknown command: {' '.join(segments) or '(empty)'}")
        return segments, found

    async def invoke(self, path: str | Sequence[str], tokens: Sequence[str] = ()) -> CommandResponse:
        segments, command = self.resolve(path)
        parse_result = build_option_set(command).parse(tokens, command_path=" ".join(segments))
        return await self.execute(command, parse_result)

    async def invoke_arguments(self, path: str | Sequence[str], arguments: Mapping[str, Any]) -> CommandResponse:
        segments, command = self.resolve(path)
        parse_result = build_option_set(command).parse_arguments(arguments, command_path=" ".join(segments))
        return await self.execute(command, parse_result)

    async def execute(self, command: Command, parse_result: ParseResult) -> CommandResponse:
        activity = Activity(name=parse_result.command_path) if self.runtime.settings.tracing else None
        context = CommandContext(self.runtime.services, activity=activity)
        started = time.monotonic()
        try:
            response = await command.execute(context, parse_result)
        except Exception as exc:
            # Commands that do not derive from BaseCommand still never leak failures.
            logger.exception("unhandled failure in %s", parse_result.command_path)
            classification = DEFAULT_CLASSIFIER.classify(exc)
            response = context.response
            response.set_error(classification.status, classification.message, next_steps=TROUBLESHOOTING_STEPS)
            context.mark_classified()
        logger.debug(
            "%s -> %s in %dms tags=%s",
            parse_result.command_path,
            response.status,
            int((time.monotonic() - started) * 1000),
            activity.tags if activity is not None else {},
        )
        return response
