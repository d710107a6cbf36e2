#!/usr/bin/env python3
"""
Allow-list of vaults the gateway routes to.

Membership and the cached underlying asset live in a mapping; a parallel list
supports enumeration. Removal swaps the last element into the freed slot, so
enumeration order is not stable across removals.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from ledger.contract import external, view
from utils.errors import AssetUnresolved, NoCode, VaultNotAllowed, ZeroAddress
from utils.validation import is_zero_address, validate_address

from .events import VaultAdded, VaultAssetRefreshed, VaultRemoved

logger = logging.getLogger(__name__)


@dataclass
class VaultEntry:
    address: str
    index: int
    underlying: Optional[str] = None


class VaultRegistry:
    """Mixin for contracts whose ``state`` has ``vaults`` and ``vault_list``"""

    # ===================== ADMIN =====================

    @external
    def add_vault(self, vault: str, *, sender: str) -> None:
        """Allow-list a vault; a failing asset() probe is tolerated and retried on first use"""
        self._check_owner(sender)
        vault = self._check_vault_code(vault)
        if vault in self.state.vaults:
            return

        self._append_entry(vault)
        asset = self._probe_asset(vault)
        self.state.vaults[vault].underlying = asset
        self.emit(VaultAdded(vault, asset))
        logger.info(f"Vault added: {vault} (asset={asset})")

    @external
    def add_vault_with_asset(self, vault: str, asset: str, *, sender: str) -> None:
        """Allow-list a vault with an explicit asset, for vaults whose asset() cannot be queried"""
        self._check_owner(sender)
        asset = validate_address(asset, "asset")
        vault = self._check_vault_code(vault, asset=asset)

        entry = self.state.vaults.get(vault)
        if entry is None:
            entry = self._append_entry(vault)
            entry.underlying = asset
            self.emit(VaultAdded(vault, asset))
            logger.info(f"Vault added with asset override: {vault} (asset={asset})")
            return

        old = entry.underlying
        entry.underlying = asset
        if old != asset:
            self.emit(VaultAssetRefreshed(vault, old, asset))
            logger.info(f"Vault asset overridden: {vault} {old} -> {asset}")

    @external
    def refresh_vault_asset(self, vault: str, *, sender: str) -> str:
        self._check_owner(sender)
        entry = self._require_allowed(vault)

        fresh = validate_address(self.chain.at(entry.address).asset(), "asset")
        if is_zero_address(fresh):
            raise ZeroAddress(f"vault {entry.address} reports a zero asset")

        old = entry.underlying
        entry.underlying = fresh
        self.emit(VaultAssetRefreshed(entry.address, old, fresh))
        logger.info(f"Vault asset refreshed: {entry.address} {old} -> {fresh}")
        return fresh

    @external
    def remove_vault(self, vault: str, *, sender: str) -> None:
        self._check_owner(sender)
        vault = validate_address(vault, "vault")
        entry = self.state.vaults.pop(vault, None)
        if entry is None:
            return

        vaults = self.state.vault_list
        last = vaults.pop()
        if last != vault:
            vaults[entry.index] = last
            self.state.vaults[last].index = entry.index

        self.emit(VaultRemoved(vault))
        logger.info(f"Vault removed: {vault}")

    # ===================== VIEWS =====================

    @view
    def get_vaults(self) -> List[str]:
        return list(self.state.vault_list)

    @view
    def vault_count(self) -> int:
        return len(self.state.vault_list)

    @view
    def is_vault_allowed(self, vault: str) -> bool:
        return validate_address(vault, "vault") in self.state.vaults

    @view
    def vault_asset(self, vault: str) -> Optional[str]:
        entry = self.state.vaults.get(validate_address(vault, "vault"))
        return entry.underlying if entry else None

    # ===================== INTERNAL =====================

    def _check_vault_code(self, vault: str, asset: Optional[str] = None) -> str:
        vault = validate_address(vault, "vault")
        if is_zero_address(vault) or (asset is not None and is_zero_address(asset)):
            raise ZeroAddress("vault and asset must be non-zero")
        if not self.chain.has_code(vault):
            raise NoCode(f"no contract deployed at {vault}")
        return vault

    def _append_entry(self, vault: str) -> VaultEntry:
        entry = VaultEntry(address=vault, index=len(self.state.vault_list))
        self.state.vaults[vault] = entry
        self.state.vault_list.append(vault)
        return entry

    def _require_allowed(self, vault: str) -> VaultEntry:
        vault = validate_address(vault, "vault")
        entry = self.state.vaults.get(vault)
        if entry is None:
            raise VaultNotAllowed(f"vault {vault} is not allow-listed")
        return entry

    def _probe_asset(self, vault: str) -> Optional[str]:
        """Query asset() in an isolated frame; any failure yields None"""
        try:
            with self.chain.frame(self.address, vault, "asset"):
                asset = validate_address(self.chain.at(vault).asset(), "asset")
        except Exception as e:
            logger.warning(f"asset() probe failed for vault {vault}, leaving unresolved: {e}")
            return None
        return None if is_zero_address(asset) else asset

    def _resolve_asset(self, entry: VaultEntry) -> str:
        """Cached asset, falling back to a live query that is cached on success"""
        if entry.underlying is not None:
            return entry.underlying

        asset = validate_address(self.chain.at(entry.address).asset(), "asset")
        if is_zero_address(asset):
            raise AssetUnresolved(f"vault {entry.address} has no resolvable asset")
        entry.underlying = asset
        logger.info(f"Vault asset resolved lazily: {entry.address} -> {asset}")
        return asset
