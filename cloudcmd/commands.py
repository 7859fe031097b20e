"""The contract every leaf command satisfies, and the base implementation.

A command is anything with ``name``, ``title``, ``description``, ``metadata``,
``register_options``, ``bind_options``, ``validate`` and ``execute``.
``BaseCommand`` supplies the execution sequence so concrete commands only
declare options, bind them and implement ``run``:

1. bind the parsed arguments into the command's options model
2. validate; on failure return the 400 response without executing
3. ``run``: resolve services from the context, call the domain operation and
   attach a typed result to the response
4. any exception is classified into a status code and message

Each invocation passes through these steps once (see ``InvocationState``).
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from .classifier import DEFAULT_CLASSIFIER, TROUBLESHOOTING_STEPS, ExceptionClassifier
from .common_options import RetryPolicyOptionDefinitions, retry_policy_errors
from .context import CommandContext, InvocationState
from .options import OptionSet, ParseResult
from .response import CommandResponse

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolMetadata:
    destructive: bool
    read_only: bool

    def to_dict(self) -> dict[str, bool]:
        return {"destructive": self.destructive, "readOnly": self.read_only}


@dataclass
class ValidationResult:
    is_valid: bool
    errors: list[str] = field(default_factory=list)
    failure_response: CommandResponse | None = None


@runtime_checkable
class Command(Protocol):
    name: str
    title: str
    description: str
    metadata: ToolMetadata

    def register_options(self, options: OptionSet) -> None: ...

    def bind_options(self, parse_result: ParseResult) -> Any: ...

    def validate(self, parse_result: ParseResult, response: CommandResponse | None = None) -> ValidationResult: ...

    async def execute(self, context: CommandContext, parse_result: ParseResult) -> CommandResponse: ...


def build_option_set(command: Command) -> OptionSet:
    options = OptionSet()
    command.register_options(options)
    return options


def command_help(command: Command) -> str:
    return inspect.cleandoc(command.description or "")


class BaseCommand:
    name: str = ""
    title: str = ""
    description: str = ""
    metadata: ToolMetadata
    classifier: ExceptionClassifier = DEFAULT_CLASSIFIER

    def __init__(self) -> None:
        self.option_set = build_option_set(self)

    def register_options(self, options: OptionSet) -> None:
        pass

    def bind_options(self, parse_result: ParseResult) -> Any:
        raise NotImplementedError

    async def run(self, context: CommandContext, options: Any) -> None:
        raise NotImplementedError

    def parse(self, tokens: list[str], *, command_path: str = "") -> ParseResult:
        return self.option_set.parse(tokens, command_path=command_path or self.name)

    def validate(self, parse_result: ParseResult, response: CommandResponse | None = None) -> ValidationResult:
        errors: list[str] = []
        missing = parse_result.missing_required(self.option_set)
        if missing:
            errors.append("Missing Required options: " + ", ".join(f"--{d.name}" for d in missing))
        if RetryPolicyOptionDefinitions.MAX_RETRIES.name in self.option_set:
            errors.extend(retry_policy_errors(parse_result))
        if errors:
            return self.validation_failure(response, *errors)
        return ValidationResult(is_valid=True)

    def validation_failure(self, response: CommandResponse | None, *errors: str) -> ValidationResult:
        if response is not None:
            response.set_error(400, "; ".join(errors))
        return ValidationResult(is_valid=False, errors=list(errors), failure_response=response)

    async def execute(self, context: CommandContext, parse_result: ParseResult) -> CommandResponse:
        options: Any = None
        try:
            options = self.bind_options(parse_result)
            context.transition(InvocationState.BOUND)

            if not self.validate(parse_result, context.response).is_valid:
                context.transition(InvocationState.INVALID)
                return context.response
            context.transition(InvocationState.VALIDATED)

            context.transition(InvocationState.EXECUTING)
            await self.run(context, options)
            context.transition(InvocationState.SUCCEEDED)
        except Exception as exc:
            logger.exception(
                "error in %s. options: %s",
                parse_result.command_path or self.name,
                options,
            )
            self.handle_exception(context, exc)
        return context.response

    def get_status_code(self, exc: BaseException) -> int:
        return self.classifier.get_status_code(exc)

    def get_error_message(self, exc: BaseException) -> str:
        return self.classifier.get_error_message(exc)

    def handle_exception(self, context: CommandContext, exc: BaseException) -> None:
        # Per-command overrides of get_status_code/get_error_message may raise;
        # the default policy takes over when they do.
        try:
            status = int(self.get_status_code(exc))
            message = str(self.get_error_message(exc))
        except Exception:
            logger.exception("status mapping failed in %s", self.name)
            fallback = self.classifier.classify(exc)
            status, message = fallback.status, fallback.message
        context.response.set_error(status, message, next_steps=TROUBLESHOOTING_STEPS)
        context.mark_classified()
        if context.activity is not None:
            context.activity.add_tag("error.type", type(exc).__name__)
