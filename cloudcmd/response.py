from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from http import HTTPStatus
from typing import Any

SUCCESS = int(HTTPStatus.OK)


def is_success(status: int) -> bool:
    return 200 <= int(status) < 300


def exit_code_for(status: int) -> int:
    return 0 if is_success(status) else 1


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(p[:1].upper() + p[1:] for p in rest)


def to_json_value(obj: Any) -> Any:
    """Convert result records to JSON-ready values with camelCase keys.

    Dataclass fields that are ``None`` are omitted.
    """
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        out: dict[str, Any] = {}
        for f in dataclasses.fields(obj):
            value = getattr(obj, f.name)
            if value is None:
                continue
            out[_camel(f.name)] = to_json_value(value)
        return out
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, dict):
        return {str(k): to_json_value(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple, set, frozenset)):
        return [to_json_value(v) for v in obj]
    return obj


@dataclass(frozen=True)
class ResponseResult:
    payload: dict[str, Any]

    @classmethod
    def create(cls, value: Any) -> ResponseResult:
        payload = to_json_value(value)
        if not isinstance(payload, dict):
            raise TypeError(f"result payload must serialize to an object, got {type(payload).__name__}")
        return cls(payload=payload)


@dataclass
class CommandResponse:
    status: int = SUCCESS
    message: str | None = None
    results: ResponseResult | None = None
    next_steps: str | None = None

    @property
    def succeeded(self) -> bool:
        return is_success(self.status)

    def set_results(self, results: ResponseResult) -> None:
        self.status = SUCCESS
        self.results = results

    def set_error(self, status: int, message: str, *, next_steps: str | None = None) -> None:
        self.status = int(status)
        # Stored verbatim; blank messages fall back to the status phrase.
        text = str(message or "")
        self.message = text if text.strip() else _phrase(self.status)
        self.results = None
        self.next_steps = next_steps

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "status": self.status,
            "message": self.message,
            "results": self.results.payload if self.results is not None else None,
        }
        if self.next_steps:
            payload["nextSteps"] = self.next_steps
        return payload


def _phrase(status: int) -> str:
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return f"status {status}"
