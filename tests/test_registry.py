import logging

import pytest

from gateway.events import VaultAdded, VaultAssetRefreshed, VaultRemoved
from ledger import BrokenAssetVault, TokenizedVault
from utils.errors import InvalidAddress, NoCode, NotOwner, VaultNotAllowed, ZeroAddress
from utils.validation import ZERO_ADDRESS


class TestAddVault:

    @pytest.mark.parametrize("null", [None, ZERO_ADDRESS])
    def test_null_vault_rejected(self, gateway, owner, null):
        with pytest.raises(ZeroAddress):
            gateway.add_vault(null, sender=owner)

    def test_account_without_code_rejected(self, gateway, owner, alice):
        with pytest.raises(NoCode):
            gateway.add_vault(alice, sender=owner)

    def test_malformed_address_rejected(self, gateway, owner):
        with pytest.raises(InvalidAddress):
            gateway.add_vault("0x1234", sender=owner)

    def test_only_owner(self, gateway, vault, alice):
        with pytest.raises(NotOwner):
            gateway.add_vault(vault.address, sender=alice)
        assert gateway.get_vaults() == []

    def test_caches_asset_and_emits_once(self, chain, gateway, vault, asset, owner):
        gateway.add_vault(vault.address, sender=owner)
        gateway.add_vault(vault.address, sender=owner)

        assert gateway.get_vaults() == [vault.address]
        assert gateway.is_vault_allowed(vault.address)
        assert gateway.vault_asset(vault.address) == asset.address
        assert chain.events(VaultAdded) == [VaultAdded(vault.address, asset.address)]

    def test_lowercase_address_is_normalised(self, gateway, vault, owner):
        gateway.add_vault(vault.address.lower(), sender=owner)
        assert gateway.get_vaults() == [vault.address]

    def test_failing_asset_probe_is_tolerated(self, chain, gateway, asset, owner, caplog):
        broken = BrokenAssetVault(chain, asset.address, "Broken", "BRK", deployer=owner)
        with caplog.at_level(logging.WARNING):
            gateway.add_vault(broken.address, sender=owner)

        assert gateway.is_vault_allowed(broken.address)
        assert gateway.vault_asset(broken.address) is None
        assert chain.events(VaultAdded) == [VaultAdded(broken.address, None)]
        assert "probe failed" in caplog.text

    def test_zero_asset_left_unresolved(self, chain, gateway, asset, owner):
        broken = BrokenAssetVault(chain, asset.address, "Zero", "ZRO", deployer=owner, mode="zero")
        gateway.add_vault(broken.address, sender=owner)
        assert gateway.vault_asset(broken.address) is None


class TestAddVaultWithAsset:

    def test_null_arguments_rejected(self, gateway, vault, asset, owner):
        with pytest.raises(ZeroAddress):
            gateway.add_vault_with_asset(ZERO_ADDRESS, asset.address, sender=owner)
        with pytest.raises(ZeroAddress):
            gateway.add_vault_with_asset(vault.address, ZERO_ADDRESS, sender=owner)

    def test_no_code_rejected(self, gateway, asset, owner, alice):
        with pytest.raises(NoCode):
            gateway.add_vault_with_asset(alice, asset.address, sender=owner)

    def test_only_owner(self, gateway, vault, asset, alice):
        with pytest.raises(NotOwner):
            gateway.add_vault_with_asset(vault.address, asset.address, sender=alice)

    def test_registers_broken_vault_with_override(self, chain, gateway, asset, owner):
        broken = BrokenAssetVault(chain, asset.address, "Broken", "BRK", deployer=owner)
        gateway.add_vault_with_asset(broken.address, asset.address, sender=owner)

        assert gateway.get_vaults() == [broken.address]
        assert gateway.vault_asset(broken.address) == asset.address
        assert chain.events(VaultAdded) == [VaultAdded(broken.address, asset.address)]

    def test_overrides_cache_of_allowed_vault(self, chain, gateway, asset, owner):
        broken = BrokenAssetVault(chain, asset.address, "Broken", "BRK", deployer=owner)
        gateway.add_vault(broken.address, sender=owner)
        gateway.add_vault_with_asset(broken.address, asset.address, sender=owner)
        gateway.add_vault_with_asset(broken.address, asset.address, sender=owner)

        assert gateway.get_vaults() == [broken.address]
        assert gateway.vault_asset(broken.address) == asset.address
        assert chain.events(VaultAssetRefreshed) == [VaultAssetRefreshed(broken.address, None, asset.address)]


class TestRefreshVaultAsset:

    def test_requires_allow_listed_vault(self, gateway, vault, owner):
        with pytest.raises(VaultNotAllowed):
            gateway.refresh_vault_asset(vault.address, sender=owner)

    def test_only_owner(self, routed, vault, alice):
        with pytest.raises(NotOwner):
            routed.refresh_vault_asset(vault.address, sender=alice)

    def test_refresh_after_repair(self, chain, gateway, asset, owner):
        broken = BrokenAssetVault(chain, asset.address, "Broken", "BRK", deployer=owner)
        gateway.add_vault(broken.address, sender=owner)
        broken.repair_asset(sender=owner)

        assert gateway.refresh_vault_asset(broken.address, sender=owner) == asset.address
        assert gateway.vault_asset(broken.address) == asset.address
        assert chain.events(VaultAssetRefreshed) == [VaultAssetRefreshed(broken.address, None, asset.address)]

    def test_zero_asset_rejected(self, chain, gateway, asset, owner):
        broken = BrokenAssetVault(chain, asset.address, "Zero", "ZRO", deployer=owner, mode="zero")
        gateway.add_vault_with_asset(broken.address, asset.address, sender=owner)

        with pytest.raises(ZeroAddress):
            gateway.refresh_vault_asset(broken.address, sender=owner)
        assert gateway.vault_asset(broken.address) == asset.address

    def test_reverting_probe_propagates(self, chain, gateway, asset, owner):
        from ledger import Revert

        broken = BrokenAssetVault(chain, asset.address, "Broken", "BRK", deployer=owner)
        gateway.add_vault(broken.address, sender=owner)
        with pytest.raises(Revert):
            gateway.refresh_vault_asset(broken.address, sender=owner)


class TestRemoveVault:

    def _deploy_vaults(self, chain, asset, owner, n):
        return [
            TokenizedVault(chain, asset.address, f"Vault {i}", f"V{i}", deployer=owner)
            for i in range(n)
        ]

    def test_remove_is_idempotent(self, chain, routed, vault, owner):
        routed.remove_vault(vault.address, sender=owner)
        routed.remove_vault(vault.address, sender=owner)

        assert routed.get_vaults() == []
        assert not routed.is_vault_allowed(vault.address)
        assert routed.vault_asset(vault.address) is None
        assert chain.events(VaultRemoved) == [VaultRemoved(vault.address)]

    def test_remove_unknown_vault_is_noop(self, chain, gateway, vault, owner):
        gateway.remove_vault(vault.address, sender=owner)
        assert chain.events(VaultRemoved) == []

    def test_only_owner(self, routed, vault, alice):
        with pytest.raises(NotOwner):
            routed.remove_vault(vault.address, sender=alice)
        assert routed.is_vault_allowed(vault.address)

    def test_swap_and_pop_keeps_membership(self, chain, gateway, asset, owner):
        vaults = self._deploy_vaults(chain, asset, owner, 4)
        for v in vaults:
            gateway.add_vault(v.address, sender=owner)

        gateway.remove_vault(vaults[1].address, sender=owner)
        remaining = gateway.get_vaults()
        assert set(remaining) == {vaults[0].address, vaults[2].address, vaults[3].address}
        assert remaining[1] == vaults[3].address

        gateway.remove_vault(vaults[3].address, sender=owner)
        gateway.remove_vault(vaults[0].address, sender=owner)
        assert gateway.get_vaults() == [vaults[2].address]
        assert gateway.vault_count() == 1

    def test_readd_after_remove(self, chain, routed, vault, asset, owner):
        routed.remove_vault(vault.address, sender=owner)
        routed.add_vault(vault.address, sender=owner)
        assert routed.get_vaults() == [vault.address]
        assert routed.vault_asset(vault.address) == asset.address
        assert len(chain.events(VaultAdded)) == 2
