"""Node id generation.

Factories take an ``IdFactory`` so callers (and tests) decide how ids are made.
"""

from __future__ import annotations

import itertools
import uuid
from typing import Callable

IdFactory = Callable[[str], str]


def create_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4()}"


class SequentialIds:
    """Deterministic ids: ``scope-1``, ``repeater-2``, ``step-3`` ..."""

    def __init__(self, start: int = 1) -> None:
        self._counter = itertools.count(start)

    def __call__(self, prefix: str) -> str:
        return f"{prefix}-{next(self._counter)}"
