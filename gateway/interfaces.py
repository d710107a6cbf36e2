#!/usr/bin/env python3
"""
Minimal capabilities the gateway requires of its collaborators
"""

from typing import Optional, Protocol


class TransferableToken(Protocol):
    """Balance token with owner-authorized delegated transfer"""

    address: str

    def balance_of(self, account: str) -> int: ...

    def allowance(self, owner: str, spender: str) -> int: ...

    def transfer(self, to: str, amount: int, *, sender: str) -> Optional[bool]: ...

    def transfer_from(self, owner: str, to: str, amount: int, *, sender: str) -> Optional[bool]: ...

    def approve(self, spender: str, amount: int, *, sender: str) -> Optional[bool]: ...


class Vault(TransferableToken, Protocol):
    """Allow-listed vault; its share token lives at the vault address"""

    def asset(self) -> str: ...

    def deposit(self, assets: int, receiver: str, *, sender: str) -> int: ...

    def request_redeem(self, shares: int, receiver: str, owner: str, *, sender: str) -> int:
        """Returns assets paid to ``receiver``, or 0 when the redemption was queued"""
        ...

    def convert_to_shares(self, assets: int) -> int: ...

    def convert_to_assets(self, shares: int) -> int: ...

    def preview_deposit(self, assets: int) -> int: ...

    def preview_redeem(self, shares: int) -> int: ...
