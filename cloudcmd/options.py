"""Option definitions, the per-command option set, and raw-argument parsing.

An ``OptionDefinition`` is immutable, shared, static data. Commands declare the
definitions they accept on an ``OptionSet``; the option set parses raw tokens
(CLI) or a tool-call argument mapping (JSON-RPC) into a ``ParseResult`` with
values already coerced to each definition's kind. Coercion failures surface as
``UsageError`` and never reach a command body.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, Iterable, Iterator, Mapping, Sequence

import click

from .errors import UsageError

_NAME_RE = re.compile(r"^[a-z][a-z0-9]*(-[a-z0-9]+)*$")
_SHORT_ALIAS_RE = re.compile(r"^[a-zA-Z]$")


class OptionKind(str, Enum):
    STRING = "string"
    INT = "int"
    BOOL = "bool"
    ENUM = "enum"
    LIST = "list"


def _camel(name: str) -> str:
    head, *rest = name.split("-")
    return head + "".join(p[:1].upper() + p[1:] for p in rest)


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return False


def _alias_token(alias: str) -> str:
    return f"-{alias}" if _SHORT_ALIAS_RE.match(alias) else f"--{alias}"


@dataclass(frozen=True)
class OptionDefinition:
    name: str
    description: str
    kind: OptionKind = OptionKind.STRING
    required: bool = False
    default: Any = None
    aliases: tuple[str, ...] = ()
    choices: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not _NAME_RE.match(self.name):
            raise ValueError(f"invalid option name: {self.name!r} (expected kebab-case)")
        for alias in self.aliases:
            if not (_NAME_RE.match(alias) or _SHORT_ALIAS_RE.match(alias)):
                raise ValueError(f"invalid alias {alias!r} for option {self.name!r}")
        if self.name in self.aliases or len(set(self.aliases)) != len(self.aliases):
            raise ValueError(f"duplicate alias on option {self.name!r}")
        if self.kind is OptionKind.ENUM and not self.choices:
            raise ValueError(f"enum option {self.name!r} requires choices")
        if self.choices and self.kind is not OptionKind.ENUM:
            raise ValueError(f"choices are only valid for enum options ({self.name!r})")
        if self.required and self.kind is OptionKind.BOOL:
            # A flag always has a value, so it can never be reported missing.
            raise ValueError(f"bool option {self.name!r} cannot be required")
        if self.default is not None:
            self._check_default()

    def _check_default(self) -> None:
        ok = {
            OptionKind.STRING: isinstance(self.default, str),
            OptionKind.INT: isinstance(self.default, int) and not isinstance(self.default, bool),
            OptionKind.BOOL: isinstance(self.default, bool),
            OptionKind.ENUM: self.default in self.choices,
            OptionKind.LIST: isinstance(self.default, tuple),
        }[self.kind]
        if not ok:
            raise ValueError(f"default for option {self.name!r} does not match kind {self.kind.value}")

    @property
    def dest(self) -> str:
        return self.name.replace("-", "_")

    @property
    def tokens(self) -> tuple[str, ...]:
        return (f"--{self.name}",) + tuple(_alias_token(a) for a in self.aliases)

    def as_required(self) -> OptionDefinition:
        return replace(self, required=True)

    def as_optional(self) -> OptionDefinition:
        return replace(self, required=False)

    def to_click_option(self) -> click.Option:
        # Options stay optional at parse time; required-ness is checked by
        # Validate so a missing option becomes a 400 response, not a usage error.
        show_default: Any = False
        if self.default is not None and self.kind is not OptionKind.LIST:
            show_default = str(self.default)
        if self.kind is OptionKind.BOOL:
            decls = [f"--{self.name}/--no-{self.name}"]
            decls += [_alias_token(a) for a in self.aliases]
            decls.append(self.dest)
            return click.Option(
                decls,
                is_flag=True,
                default=bool(self.default),
                required=False,
                help=self.description,
                show_default=show_default,
            )
        param_type: Any = click.STRING
        if self.kind is OptionKind.INT:
            param_type = click.INT
        elif self.kind is OptionKind.ENUM:
            param_type = click.Choice(list(self.choices), case_sensitive=False)
        return click.Option(
            list(self.tokens) + [self.dest],
            type=param_type,
            default=None,
            required=False,
            multiple=self.kind is OptionKind.LIST,
            help=self.description,
            show_default=show_default,
        )

    def json_schema(self) -> dict[str, Any]:
        schema: dict[str, Any] = {"description": self.description}
        if self.kind is OptionKind.INT:
            schema["type"] = "integer"
        elif self.kind is OptionKind.BOOL:
            schema["type"] = "boolean"
        elif self.kind is OptionKind.ENUM:
            schema["type"] = "string"
            schema["enum"] = list(self.choices)
        elif self.kind is OptionKind.LIST:
            schema["type"] = "array"
            schema["items"] = {"type": "string"}
        else:
            schema["type"] = "string"
        if self.default is not None:
            schema["default"] = list(self.default) if self.kind is OptionKind.LIST else self.default
        return schema


@dataclass(frozen=True)
class ParseResult:
    command_path: str
    values: Mapping[str, Any] = field(default_factory=dict)

    def get(self, definition: OptionDefinition) -> Any:
        value = self.values.get(definition.name)
        if _is_empty(value):
            if definition.kind is OptionKind.LIST and definition.default is not None:
                return list(definition.default)
            return definition.default
        return value

    def has_value(self, definition: OptionDefinition) -> bool:
        return not _is_empty(self.get(definition))

    def missing_required(self, definitions: Iterable[OptionDefinition]) -> list[OptionDefinition]:
        return [d for d in definitions if d.required and not self.has_value(d)]


class OptionSet:
    """Ordered, collision-free set of option definitions accepted by one command."""

    def __init__(self, definitions: Iterable[OptionDefinition] = ()) -> None:
        self._definitions: list[OptionDefinition] = []
        self._by_token: dict[str, OptionDefinition] = {}
        for d in definitions:
            self.add(d)

    def add(self, definition: OptionDefinition) -> None:
        keys = (definition.name, *definition.aliases)
        for key in keys:
            existing = self._by_token.get(key)
            if existing is not None:
                raise ValueError(
                    f"option {definition.name!r} collides with {existing.name!r} on {key!r}"
                )
        self._definitions.append(definition)
        for key in keys:
            self._by_token[key] = definition

    def extend(self, *definitions: OptionDefinition) -> None:
        for d in definitions:
            self.add(d)

    @property
    def definitions(self) -> tuple[OptionDefinition, ...]:
        return tuple(self._definitions)

    def __iter__(self) -> Iterator[OptionDefinition]:
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)

    def __contains__(self, name: object) -> bool:
        return name in self._by_token

    def get(self, name: str) -> OptionDefinition | None:
        return self._by_token.get(name)

    def to_click_command(
        self,
        name: str,
        *,
        help: str | None = None,
        short_help: str | None = None,
        callback: Callable[..., Any] | None = None,
        add_help_option: bool = True,
    ) -> click.Command:
        return click.Command(
            name,
            params=[d.to_click_option() for d in self._definitions],
            callback=callback,
            help=help,
            short_help=short_help,
            add_help_option=add_help_option,
        )

    def parse(self, tokens: Sequence[str], *, command_path: str) -> ParseResult:
        cmd = self.to_click_command(command_path or "command", add_help_option=False)
        try:
            ctx = cmd.make_context(command_path or "command", list(tokens))
        except click.ClickException as e:
            raise UsageError(e.format_message()) from e
        return self.parse_params(ctx.params, command_path=command_path)

    def parse_params(self, params: Mapping[str, Any], *, command_path: str) -> ParseResult:
        values: dict[str, Any] = {}
        for d in self._definitions:
            value = params.get(d.dest)
            if isinstance(value, tuple):
                value = list(value)
            values[d.name] = value
        return ParseResult(command_path=command_path, values=values)

    def parse_arguments(self, arguments: Mapping[str, Any], *, command_path: str) -> ParseResult:
        return self.parse(self.tokens_from_arguments(arguments), command_path=command_path)

    def tokens_from_arguments(self, arguments: Mapping[str, Any]) -> list[str]:
        lookup: dict[str, OptionDefinition] = {}
        for d in self._definitions:
            for key in (d.name, d.dest, _camel(d.name), *d.aliases):
                lookup.setdefault(key, d)
        unknown = sorted(str(k) for k in arguments if k not in lookup)
        if unknown:
            raise UsageError(f"unknown argument(s): {', '.join(unknown)}")

        tokens: list[str] = []
        seen: dict[str, str] = {}
        for key, value in arguments.items():
            d = lookup[key]
            first = seen.setdefault(d.name, str(key))
            if first != key:
                raise UsageError(f"duplicate argument for --{d.name}: {first!r} and {key!r}")
            if value is None:
                continue
            if d.kind is OptionKind.BOOL:
                if not isinstance(value, bool):
                    raise UsageError(f"invalid value for --{d.name}: expected a boolean")
                tokens.append(f"--{d.name}" if value else f"--no-{d.name}")
                continue
            if d.kind is OptionKind.LIST:
                items = value if isinstance(value, (list, tuple)) else [value]
                for item in items:
                    tokens.extend([f"--{d.name}", str(item)])
                continue
            if isinstance(value, (dict, list, tuple)) or isinstance(value, bool):
                raise UsageError(f"invalid value for --{d.name}: expected a {d.kind.value}")
            tokens.extend([f"--{d.name}", str(value)])
        return tokens

    def json_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {d.name: d.json_schema() for d in self._definitions},
            "required": [d.name for d in self._definitions if d.required],
            "additionalProperties": False,
        }
