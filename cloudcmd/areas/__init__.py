"""Functional areas: each contributes domain services and a command subtree."""

from __future__ import annotations

from .appservice import AppServiceSetup
from .queue import QueueSetup


def all_areas() -> list:
    return [QueueSetup(), AppServiceSetup()]
