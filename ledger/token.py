#!/usr/bin/env python3
"""
Transferable-balance tokens with owner-authorized delegated transfer.

``ERC20`` reverts on failure and returns ``True`` on success. The variants
reproduce non-standard behaviour seen in deployed tokens: no return value,
``False`` instead of a revert, and refusing to change a non-zero approval to
another non-zero value.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Tuple

from utils.validation import MAX_UINT256, ZERO_ADDRESS, validate_address, validate_uint

from .chain import Revert
from .contract import Contract, external, view

logger = logging.getLogger(__name__)


class InsufficientBalance(Revert):
    pass


class InsufficientAllowance(Revert):
    pass


@dataclass
class TokenState:
    balances: Dict[str, int] = field(default_factory=dict)
    allowances: Dict[Tuple[str, str], int] = field(default_factory=dict)
    total_supply: int = 0


@dataclass(frozen=True)
class Transfer:
    sender: str
    receiver: str
    value: int


@dataclass(frozen=True)
class Approval:
    owner: str
    spender: str
    value: int


class ERC20(Contract):
    """Standard token; ``mint`` is an open faucet for simulations"""

    def __init__(self, chain, name: str, symbol: str, decimals: int = 18, *, deployer: str, state=None):
        self.name = name
        self.symbol = symbol
        self.decimals = decimals
        super().__init__(chain, state if state is not None else TokenState(), deployer=deployer)

    # ===================== VIEWS =====================

    @view
    def balance_of(self, account: str) -> int:
        return self.state.balances.get(validate_address(account, "account"), 0)

    @view
    def allowance(self, owner: str, spender: str) -> int:
        key = (validate_address(owner, "owner"), validate_address(spender, "spender"))
        return self.state.allowances.get(key, 0)

    @view
    def total_supply(self) -> int:
        return self.state.total_supply

    # ===================== EXTERNAL =====================

    @external
    def transfer(self, to: str, amount: int, *, sender: str) -> bool:
        self._transfer(sender, to, amount)
        return True

    @external
    def transfer_from(self, owner: str, to: str, amount: int, *, sender: str) -> bool:
        self._spend_allowance(owner, sender, amount)
        self._transfer(owner, to, amount)
        return True

    @external
    def approve(self, spender: str, amount: int, *, sender: str) -> bool:
        self._approve(sender, spender, amount)
        return True

    @external
    def mint(self, to: str, amount: int, *, sender: str) -> bool:
        self._mint(to, amount)
        return True

    # ===================== INTERNAL =====================

    def _transfer(self, owner: str, to: str, amount: int) -> None:
        owner = validate_address(owner, "from")
        to = validate_address(to, "to")
        amount = validate_uint(amount)
        if to == ZERO_ADDRESS:
            raise Revert(f"{self.symbol}: transfer to the zero address")
        balance = self.state.balances.get(owner, 0)
        if balance < amount:
            raise InsufficientBalance(f"{self.symbol}: balance {balance} of {owner} below {amount}")
        self.state.balances[owner] = balance - amount
        self.state.balances[to] = self.state.balances.get(to, 0) + amount
        self.emit(Transfer(owner, to, amount))

    def _approve(self, owner: str, spender: str, amount: int) -> None:
        owner = validate_address(owner, "owner")
        spender = validate_address(spender, "spender")
        amount = validate_uint(amount)
        if spender == ZERO_ADDRESS:
            raise Revert(f"{self.symbol}: approve to the zero address")
        self.state.allowances[(owner, spender)] = amount
        self.emit(Approval(owner, spender, amount))

    def _spend_allowance(self, owner: str, spender: str, amount: int) -> None:
        owner = validate_address(owner, "owner")
        amount = validate_uint(amount)
        current = self.state.allowances.get((owner, spender), 0)
        if current == MAX_UINT256:
            return
        if current < amount:
            raise InsufficientAllowance(f"{self.symbol}: allowance {current} of {spender} over {owner} below {amount}")
        self.state.allowances[(owner, spender)] = current - amount

    def _mint(self, to: str, amount: int) -> None:
        to = validate_address(to, "to")
        amount = validate_uint(amount)
        if to == ZERO_ADDRESS:
            raise Revert(f"{self.symbol}: mint to the zero address")
        self.state.total_supply += amount
        self.state.balances[to] = self.state.balances.get(to, 0) + amount
        self.emit(Transfer(ZERO_ADDRESS, to, amount))

    def _burn(self, owner: str, amount: int) -> None:
        owner = validate_address(owner, "owner")
        amount = validate_uint(amount)
        balance = self.state.balances.get(owner, 0)
        if balance < amount:
            raise InsufficientBalance(f"{self.symbol}: burn {amount} exceeds balance {balance} of {owner}")
        self.state.balances[owner] = balance - amount
        self.state.total_supply -= amount
        self.emit(Transfer(owner, ZERO_ADDRESS, amount))


class NoReturnERC20(ERC20):
    """Token whose transfer/approve return nothing"""

    @external
    def transfer(self, to: str, amount: int, *, sender: str):
        self._transfer(sender, to, amount)

    @external
    def transfer_from(self, owner: str, to: str, amount: int, *, sender: str):
        self._spend_allowance(owner, sender, amount)
        self._transfer(owner, to, amount)

    @external
    def approve(self, spender: str, amount: int, *, sender: str):
        self._approve(sender, spender, amount)


class ZeroFirstApproveERC20(ERC20):
    """Token that rejects changing a non-zero approval to another non-zero value"""

    @external
    def approve(self, spender: str, amount: int, *, sender: str) -> bool:
        if amount != 0 and self.allowance(sender, spender) != 0:
            raise Revert(f"{self.symbol}: approve from non-zero to non-zero allowance")
        self._approve(sender, spender, amount)
        return True


class FalseReturningERC20(ERC20):
    """Token that reports failed transfers by returning False"""

    @external
    def transfer(self, to: str, amount: int, *, sender: str) -> bool:
        if self.balance_of(sender) < amount:
            return False
        self._transfer(sender, to, amount)
        return True

    @external
    def transfer_from(self, owner: str, to: str, amount: int, *, sender: str) -> bool:
        if self.balance_of(owner) < amount or self.allowance(owner, sender) < amount:
            return False
        self._spend_allowance(owner, sender, amount)
        self._transfer(owner, to, amount)
        return True
