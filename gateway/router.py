#!/usr/bin/env python3
"""
Vault Gateway

Single entry point for depositing into and redeeming from allow-listed vaults.
The gateway never holds value at rest: everything it pulls in is forwarded to
a vault or handed back within the same call.

Redemption results are overloaded by the vaults: a positive return is the
amount of assets already delivered, while 0 means the vault queued the
request and will settle it later. A redemption that is genuinely worth zero
assets is indistinguishable from a queued one.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ledger.contract import Contract, external, view
from utils.errors import InvalidReceiver, ZeroAddress, ZeroAmount, ZeroReceiver
from utils.validation import is_zero_address, validate_address, validate_uint

from .events import GatewayDeposit, GatewayRedeem
from .guard import ReentrancyGuard
from .ownership import Ownable2Step
from .registry import VaultEntry, VaultRegistry
from .transfer import force_approve, safe_transfer, safe_transfer_from

logger = logging.getLogger(__name__)


@dataclass
class GatewayState:
    owner: str
    pending_owner: Optional[str] = None
    vaults: Dict[str, VaultEntry] = field(default_factory=dict)
    vault_list: List[str] = field(default_factory=list)


class VaultGateway(Ownable2Step, VaultRegistry, Contract):
    """
    Routing gateway in front of a dynamic set of vaults

    Mutating routing calls (``deposit``, ``redeem``) share one reentrancy
    guard, so a vault calling back into either of them mid-operation makes
    the outer call fail and roll back.
    """

    def __init__(self, chain, *, deployer: str):
        deployer = validate_address(deployer, "deployer")
        super().__init__(chain, GatewayState(owner=deployer), deployer=deployer)
        self._guard = ReentrancyGuard()
        logger.info(f"VaultGateway deployed at {self.address} (owner={deployer})")

    # ===================== ROUTING =====================

    @external
    def deposit(self, vault: str, amount: int, receiver: str, partner_id: int, *, sender: str) -> int:
        """
        Pull ``amount`` of the vault's asset from the caller and deposit it for ``receiver``

        Returns:
            Shares minted by the vault
        """
        with self._guard.nonreentrant("deposit"):
            entry = self._require_allowed(vault)
            amount = validate_uint(amount)
            if amount == 0:
                raise ZeroAmount("deposit amount is zero")
            receiver = validate_address(receiver, "receiver")
            if is_zero_address(receiver):
                raise ZeroReceiver("deposit receiver is the zero address")
            if receiver == self.address:
                raise InvalidReceiver("deposit receiver is the gateway")
            partner_id = validate_uint(partner_id, "partner_id")

            vault_contract = self.chain.at(entry.address)
            token = self.chain.at(self._resolve_asset(entry))

            held_before = token.balance_of(self.address)
            safe_transfer_from(token, sender, self.address, amount, sender=self.address)
            force_approve(token, entry.address, amount, sender=self.address)
            shares = vault_contract.deposit(amount, receiver, sender=self.address)
            force_approve(token, entry.address, 0, sender=self.address)

            leftover = token.balance_of(self.address) - held_before
            if leftover > 0:
                logger.info(f"Vault {entry.address} left {leftover} unconsumed, returning to {sender}")
                safe_transfer(token, sender, leftover, sender=self.address)

            self.emit(GatewayDeposit(partner_id, entry.address, sender, receiver, amount, shares))
            logger.info(
                f"Deposit routed: vault={entry.address} caller={sender} receiver={receiver} "
                f"amount={amount} shares={shares} partner={partner_id}"
            )
            return shares

    @external
    def redeem(self, vault: str, shares: int, receiver: str, shares_owner: str, partner_id: int, *, sender: str) -> int:
        """
        Pull ``shares`` from ``shares_owner`` and request redemption to ``receiver``

        ``shares_owner`` must have approved the gateway on the vault's share
        token; the caller may be a third party submitting on their behalf.

        Returns:
            Assets delivered to ``receiver``, or 0 if the vault queued the request
        """
        with self._guard.nonreentrant("redeem"):
            entry = self._require_allowed(vault)
            shares = validate_uint(shares, "shares")
            if shares == 0:
                raise ZeroAmount("redeem shares is zero")
            receiver = validate_address(receiver, "receiver")
            if is_zero_address(receiver):
                raise ZeroReceiver("redeem receiver is the zero address")
            if receiver == self.address:
                raise InvalidReceiver("redeem receiver is the gateway")
            shares_owner = validate_address(shares_owner, "shares_owner")
            if is_zero_address(shares_owner):
                raise ZeroAddress("shares owner is the zero address")
            partner_id = validate_uint(partner_id, "partner_id")

            vault_contract = self.chain.at(entry.address)

            held_before = vault_contract.balance_of(self.address)
            safe_transfer_from(vault_contract, shares_owner, self.address, shares, sender=self.address)
            result = vault_contract.request_redeem(shares, receiver, self.address, sender=self.address)

            leftover = vault_contract.balance_of(self.address) - held_before
            if leftover > 0:
                logger.info(f"Vault {entry.address} left {leftover} shares with the gateway, returning to {shares_owner}")
                safe_transfer(vault_contract, shares_owner, leftover, sender=self.address)

            instant = result > 0
            self.emit(GatewayRedeem(partner_id, entry.address, shares_owner, receiver, shares, result, instant))
            logger.info(
                f"Redeem routed: vault={entry.address} owner={shares_owner} receiver={receiver} "
                f"shares={shares} result={result} instant={instant} partner={partner_id}"
            )
            return result

    # ===================== QUOTES =====================

    @view
    def convert_to_shares(self, vault: str, assets: int) -> int:
        entry = self._require_allowed(vault)
        return self.chain.at(entry.address).convert_to_shares(assets)

    @view
    def convert_to_assets(self, vault: str, shares: int) -> int:
        entry = self._require_allowed(vault)
        return self.chain.at(entry.address).convert_to_assets(shares)

    @view
    def preview_deposit(self, vault: str, assets: int) -> int:
        entry = self._require_allowed(vault)
        return self.chain.at(entry.address).preview_deposit(assets)

    @view
    def preview_redeem(self, vault: str, shares: int) -> int:
        entry = self._require_allowed(vault)
        return self.chain.at(entry.address).preview_redeem(shares)

    # ===================== ALLOWANCES =====================

    @view
    def share_allowance(self, vault: str, owner: str) -> int:
        """Shares of ``vault`` the gateway may pull from ``owner``"""
        return self.chain.at(vault).allowance(owner, self.address)

    @view
    def asset_allowance(self, vault: str, owner: str) -> int:
        """Underlying units the gateway may pull from ``owner``; 0 if the asset is unknown"""
        owner = validate_address(owner, "owner")
        try:
            with self.chain.frame(self.address, vault, "asset"):
                asset = validate_address(self.chain.at(vault).asset(), "asset")
            if is_zero_address(asset):
                return 0
            token = self.chain.at(asset)
        except Exception as e:
            logger.debug(f"asset allowance unavailable for vault {vault}: {e}")
            return 0
        return token.allowance(owner, self.address)
