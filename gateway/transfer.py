#!/usr/bin/env python3
"""
Uniform handling of transfer-primitive calls.

Tokens that return nothing are treated as successful, tokens that return
``False`` raise ``TransferFailed``, and reverts propagate unchanged.
"""

from utils.errors import TransferFailed

from .interfaces import TransferableToken


def _check(token: TransferableToken, op: str, result) -> None:
    if result is not None and not result:
        raise TransferFailed(f"{op} on {token.address} returned {result!r}")


def safe_transfer(token: TransferableToken, to: str, amount: int, *, sender: str) -> None:
    _check(token, "transfer", token.transfer(to, amount, sender=sender))


def safe_transfer_from(token: TransferableToken, owner: str, to: str, amount: int, *, sender: str) -> None:
    _check(token, "transfer_from", token.transfer_from(owner, to, amount, sender=sender))


def force_approve(token: TransferableToken, spender: str, amount: int, *, sender: str) -> None:
    """Set an exact approval, resetting to zero first"""
    _check(token, "approve", token.approve(spender, 0, sender=sender))
    if amount:
        _check(token, "approve", token.approve(spender, amount, sender=sender))
