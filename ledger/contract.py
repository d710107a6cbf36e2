#!/usr/bin/env python3
"""
Base class and call decorators for contracts hosted on a Chain
"""

from __future__ import annotations

import functools
from typing import Any, Callable

from utils.validation import validate_address


class Contract:
    """
    Hosted contract

    All mutable storage lives in ``self.state`` (a dataclass) so the chain can
    snapshot and restore it. Anything kept outside ``state`` is configuration
    or transient and is not rolled back.
    """

    def __init__(self, chain, state: Any, *, deployer: str):
        self.chain = chain
        self.state = state
        self.address = chain.register(self, deployer)

    def emit(self, event: Any) -> None:
        self.chain.emit(self.address, event)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.address}>"


def external(fn: Callable) -> Callable:
    """Mark a mutating entry point; runs in its own frame and needs ``sender=``"""

    @functools.wraps(fn)
    def wrapper(self, *args, sender: str, **kwargs):
        sender = validate_address(sender, "sender")
        with self.chain.frame(sender, self.address, fn.__name__):
            return fn(self, *args, sender=sender, **kwargs)

    return wrapper


def view(fn: Callable) -> Callable:
    """Mark a read-only entry point; reads are serialised with mutating calls"""

    @functools.wraps(fn)
    def wrapper(self, *args, **kwargs):
        with self.chain.lock:
            return fn(self, *args, **kwargs)

    return wrapper
