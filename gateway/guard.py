#!/usr/bin/env python3
from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from utils.errors import ReentrantCall


class ReentrancyGuard:
    """Single flag shared by all guarded entry points of one contract.

    Entering while the flag is held raises instead of blocking, so a
    collaborator calling back into the contract mid-operation fails fast.
    """

    def __init__(self):
        self._entered = False

    @property
    def entered(self) -> bool:
        return self._entered

    @contextmanager
    def nonreentrant(self, name: str = "call") -> Iterator[None]:
        if self._entered:
            raise ReentrantCall(f"reentrant {name} rejected")
        self._entered = True
        try:
            yield
        finally:
            self._entered = False
