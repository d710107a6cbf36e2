#!/usr/bin/env python3
"""
Two-step ownership hand-over.

The current owner nominates a candidate; ownership moves only when the
candidate accepts, so a mistyped or unreachable address never becomes owner.
"""

import logging
from typing import Optional

from ledger.contract import external, view
from utils.errors import NotOwner, NotPendingOwner, ZeroAddress
from utils.validation import is_zero_address, validate_address

from .events import OwnershipTransferred, OwnershipTransferStarted

logger = logging.getLogger(__name__)


class Ownable2Step:
    """Mixin for contracts whose ``state`` has ``owner`` and ``pending_owner``"""

    @view
    def owner(self) -> str:
        return self.state.owner

    @view
    def pending_owner(self) -> Optional[str]:
        return self.state.pending_owner

    def _check_owner(self, sender: str) -> None:
        if sender != self.state.owner:
            raise NotOwner(f"{sender} is not the owner")

    @external
    def transfer_ownership(self, new_owner: str, *, sender: str) -> None:
        self._check_owner(sender)
        new_owner = validate_address(new_owner, "new_owner")
        if is_zero_address(new_owner):
            raise ZeroAddress("new owner is the zero address")

        self.state.pending_owner = new_owner
        self.emit(OwnershipTransferStarted(self.state.owner, new_owner))
        logger.info(f"Ownership transfer started: {self.state.owner} -> {new_owner}")

    @external
    def accept_ownership(self, *, sender: str) -> None:
        if self.state.pending_owner is None or sender != self.state.pending_owner:
            raise NotPendingOwner(f"{sender} is not the pending owner")

        previous = self.state.owner
        self.state.owner = sender
        self.state.pending_owner = None
        self.emit(OwnershipTransferred(previous, sender))
        logger.info(f"Ownership transferred: {previous} -> {sender}")
