#!/usr/bin/env python3
"""
Reference vaults exchanging an underlying asset for shares.

Each vault is its own share token. ``TokenizedVault`` settles redemptions
synchronously; ``AsyncRedeemVault`` queues them and pays out later through
``fulfill``, a path the gateway is not party to. The remaining classes are
misbehaving collaborators used to exercise the gateway's guards.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from fractions import Fraction
from typing import Dict, Optional, Union

from utils.validation import ZERO_ADDRESS, validate_address, validate_uint

from .chain import Revert
from .contract import external, view
from .token import ERC20, TokenState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Deposit:
    sender: str
    owner: str
    assets: int
    shares: int


@dataclass(frozen=True)
class Withdraw:
    sender: str
    receiver: str
    owner: str
    assets: int
    shares: int


@dataclass(frozen=True)
class RedeemRequested:
    request_id: int
    owner: str
    receiver: str
    shares: int


@dataclass
class RedeemRequest:
    owner: str
    receiver: str
    shares: int
    fulfilled: bool = False


class TokenizedVault(ERC20):
    """
    Vault with a fixed exchange rate

    ``assets_per_share`` is the number of underlying units one share is worth;
    conversions round down.
    """

    def __init__(
        self,
        chain,
        asset: str,
        name: str,
        symbol: str,
        *,
        deployer: str,
        assets_per_share: Union[int, Fraction] = 1,
        state=None
    ):
        self._asset = validate_address(asset, "asset")
        self.assets_per_share = Fraction(assets_per_share)
        if self.assets_per_share <= 0:
            raise ValueError("assets_per_share must be positive")
        self.operator = validate_address(deployer, "deployer")
        super().__init__(chain, name, symbol, deployer=deployer, state=state)

    def _asset_token(self) -> ERC20:
        return self.chain.at(self._asset)

    @view
    def asset(self) -> str:
        return self._asset

    @view
    def total_assets(self) -> int:
        return self._asset_token().balance_of(self.address)

    @view
    def convert_to_shares(self, assets: int) -> int:
        return int(Fraction(validate_uint(assets, "assets")) / self.assets_per_share)

    @view
    def convert_to_assets(self, shares: int) -> int:
        return int(Fraction(validate_uint(shares, "shares")) * self.assets_per_share)

    @view
    def preview_deposit(self, assets: int) -> int:
        return self.convert_to_shares(assets)

    @view
    def preview_redeem(self, shares: int) -> int:
        return self.convert_to_assets(shares)

    @external
    def deposit(self, assets: int, receiver: str, *, sender: str) -> int:
        shares = self.preview_deposit(assets)
        self._asset_token().transfer_from(sender, self.address, assets, sender=self.address)
        self._mint(receiver, shares)
        self.emit(Deposit(sender, validate_address(receiver), assets, shares))
        return shares

    @external
    def request_redeem(self, shares: int, receiver: str, owner: str, *, sender: str) -> int:
        """Redeem immediately; returns the assets delivered to ``receiver``"""
        owner = validate_address(owner, "owner")
        if owner != sender:
            raise Revert(f"{self.symbol}: owner {owner} is not the caller")
        assets = self.preview_redeem(shares)
        self._burn(owner, shares)
        self._asset_token().transfer(receiver, assets, sender=self.address)
        self.emit(Withdraw(sender, validate_address(receiver), owner, assets, shares))
        return assets


@dataclass
class AsyncVaultState(TokenState):
    requests: Dict[int, RedeemRequest] = field(default_factory=dict)
    next_request_id: int = 1


class AsyncRedeemVault(TokenizedVault):
    """Vault that escrows shares on request and settles on ``fulfill``"""

    def __init__(self, chain, asset: str, name: str, symbol: str, *, deployer: str, assets_per_share=1):
        super().__init__(
            chain, asset, name, symbol,
            deployer=deployer, assets_per_share=assets_per_share, state=AsyncVaultState(),
        )

    @external
    def request_redeem(self, shares: int, receiver: str, owner: str, *, sender: str) -> int:
        """Queue a redemption; returns 0 to signal it is pending"""
        owner = validate_address(owner, "owner")
        receiver = validate_address(receiver, "receiver")
        if owner != sender:
            raise Revert(f"{self.symbol}: owner {owner} is not the caller")
        self._transfer(owner, self.address, shares)
        request_id = self.state.next_request_id
        self.state.next_request_id += 1
        self.state.requests[request_id] = RedeemRequest(owner=owner, receiver=receiver, shares=shares)
        self.emit(RedeemRequested(request_id, owner, receiver, shares))
        logger.info(f"{self.symbol}: queued redeem request {request_id} for {shares} shares")
        return 0

    @external
    def fulfill(self, request_id: int, *, sender: str) -> int:
        """Settle a queued redemption; only the vault operator may call"""
        if sender != self.operator:
            raise Revert(f"{self.symbol}: caller is not the operator")
        request = self.state.requests.get(request_id)
        if request is None or request.fulfilled:
            raise Revert(f"{self.symbol}: unknown or settled request {request_id}")
        assets = self.preview_redeem(request.shares)
        request.fulfilled = True
        self._burn(self.address, request.shares)
        self._asset_token().transfer(request.receiver, assets, sender=self.address)
        self.emit(Withdraw(sender, request.receiver, request.owner, assets, request.shares))
        return assets

    @view
    def pending_redeem_request(self, request_id: int) -> Optional[RedeemRequest]:
        request = self.state.requests.get(request_id)
        if request is None or request.fulfilled:
            return None
        return RedeemRequest(request.owner, request.receiver, request.shares)


@dataclass
class BrokenAssetState(TokenState):
    asset_mode: str = "revert"


class BrokenAssetVault(TokenizedVault):
    """Vault whose ``asset()`` reverts ("revert") or reports the null address ("zero")"""

    def __init__(self, chain, asset: str, name: str, symbol: str, *, deployer: str, mode: str = "revert"):
        if mode not in ("revert", "zero"):
            raise ValueError(f"unknown mode: {mode}")
        super().__init__(chain, asset, name, symbol, deployer=deployer, state=BrokenAssetState(asset_mode=mode))

    @view
    def asset(self) -> str:
        if self.state.asset_mode == "revert":
            raise Revert(f"{self.symbol}: asset() unavailable")
        if self.state.asset_mode == "zero":
            return ZERO_ADDRESS
        return self._asset

    @external
    def repair_asset(self, *, sender: str) -> None:
        self.state.asset_mode = "ok"


class PartialDepositVault(TokenizedVault):
    """Vault that pulls only ``consumed`` of each deposit"""

    def __init__(self, chain, asset: str, name: str, symbol: str, *, deployer: str, consumed=Fraction(1, 2)):
        self.consumed = Fraction(consumed)
        super().__init__(chain, asset, name, symbol, deployer=deployer)

    @external
    def deposit(self, assets: int, receiver: str, *, sender: str) -> int:
        pulled = int(Fraction(validate_uint(assets, "assets")) * self.consumed)
        shares = self.preview_deposit(pulled)
        self._asset_token().transfer_from(sender, self.address, pulled, sender=self.address)
        self._mint(receiver, shares)
        self.emit(Deposit(sender, validate_address(receiver), pulled, shares))
        return shares


@dataclass
class ReentrantState(TokenState):
    gateway: Optional[str] = None
    target: Optional[str] = None


class ReentrantVault(TokenizedVault):
    """Vault that calls back into the gateway while handling a gateway call"""

    def __init__(self, chain, asset: str, name: str, symbol: str, *, deployer: str):
        super().__init__(chain, asset, name, symbol, deployer=deployer, state=ReentrantState())

    @external
    def arm(self, gateway: str, target: str, *, sender: str) -> None:
        if target not in ("deposit", "redeem"):
            raise ValueError(f"unknown target: {target}")
        self.state.gateway = validate_address(gateway, "gateway")
        self.state.target = target

    def _attack(self) -> None:
        if self.state.gateway is None:
            return
        gateway = self.chain.at(self.state.gateway)
        if self.state.target == "deposit":
            gateway.deposit(self.address, 1, self.address, 0, sender=self.address)
        else:
            gateway.redeem(self.address, 1, self.address, self.address, 0, sender=self.address)

    @external
    def deposit(self, assets: int, receiver: str, *, sender: str) -> int:
        self._attack()
        return super().deposit(assets, receiver, sender=sender)

    @external
    def request_redeem(self, shares: int, receiver: str, owner: str, *, sender: str) -> int:
        self._attack()
        return super().request_redeem(shares, receiver, owner, sender=sender)
