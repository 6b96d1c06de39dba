"""Compensating actions run in reverse order when a multi-step change fails."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Step:
    name: str
    function: Callable[[], object]


class Rollback:
    """A stack of named undo actions."""

    def __init__(self) -> None:
        self._steps: list[_Step] = []

    def add(self, name: str, function: Callable[[], object]) -> Rollback:
        """Push an undo action; returns self so calls can be chained."""
        self._steps.append(_Step(name, function))
        return self

    def do(self) -> list[str]:
        """Run every undo action, last added first, and return their names in run order."""
        called: list[str] = []
        for step in reversed(self._steps):
            logger.info("Rollback: %s", step.name)
            step.function()
            called.append(step.name)
        return called