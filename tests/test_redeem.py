import pytest

from gateway.events import GatewayRedeem
from ledger import InsufficientAllowance, InsufficientBalance
from utils.errors import InvalidReceiver, VaultNotAllowed, ZeroAddress, ZeroAmount, ZeroReceiver
from utils.validation import ZERO_ADDRESS


class TestRedeemPreconditions:

    def test_zero_shares(self, routed, vault, alice):
        with pytest.raises(ZeroAmount):
            routed.redeem(vault.address, 0, alice, alice, 0, sender=alice)

    @pytest.mark.parametrize("null", [None, ZERO_ADDRESS])
    def test_null_receiver_without_shares(self, routed, vault, alice, null):
        with pytest.raises(ZeroReceiver):
            routed.redeem(vault.address, 10, null, alice, 0, sender=alice)

    def test_null_receiver_with_approved_shares(self, routed, vault, alice, shares_for):
        shares_for(alice, 100)
        vault.approve(routed.address, 100, sender=alice)
        with pytest.raises(ZeroReceiver):
            routed.redeem(vault.address, 10, None, alice, 0, sender=alice)
        assert vault.balance_of(alice) == 100

    def test_gateway_as_receiver(self, routed, vault, asset, alice, shares_for):
        shares_for(alice, 100)
        vault.approve(routed.address, 40, sender=alice)
        with pytest.raises(InvalidReceiver):
            routed.redeem(vault.address, 40, routed.address, alice, 0, sender=alice)
        assert vault.balance_of(alice) == 100
        assert vault.balance_of(routed.address) == 0
        assert asset.balance_of(routed.address) == 0

    def test_null_shares_owner(self, routed, vault, alice):
        with pytest.raises(ZeroAddress):
            routed.redeem(vault.address, 10, alice, ZERO_ADDRESS, 0, sender=alice)

    def test_vault_not_allowed(self, gateway, vault, alice):
        with pytest.raises(VaultNotAllowed):
            gateway.redeem(vault.address, 0, None, None, 0, sender=alice)


class TestSynchronousRedeem:

    def test_partial_redeem_scenario(self, chain, routed, vault, asset, alice, bob, shares_for):
        shares_for(alice, 100)
        vault.approve(routed.address, 100, sender=alice)
        bob_before = asset.balance_of(bob)

        result = routed.redeem(vault.address, 40, bob, alice, 9, sender=alice)

        assert result == 40
        assert asset.balance_of(bob) == bob_before + 40
        assert vault.balance_of(routed.address) == 0
        assert vault.balance_of(alice) == 60
        assert asset.balance_of(routed.address) == 0
        assert chain.events(GatewayRedeem) == [GatewayRedeem(9, vault.address, alice, bob, 40, 40, True)]

    def test_sponsored_redeem(self, routed, vault, asset, alice, bob, shares_for):
        shares_for(alice, 100)
        vault.approve(routed.address, 50, sender=alice)

        assert routed.redeem(vault.address, 50, alice, alice, 0, sender=bob) == 50
        assert vault.balance_of(alice) == 50
        assert asset.balance_of(alice) == 1_000_000 - 50
        assert vault.allowance(alice, routed.address) == 0

    def test_requires_share_approval(self, chain, routed, vault, alice, bob, shares_for):
        shares_for(alice, 100)
        logs_before = len(chain.logs)
        with pytest.raises(InsufficientAllowance):
            routed.redeem(vault.address, 10, bob, alice, 0, sender=bob)
        assert vault.balance_of(alice) == 100
        assert len(chain.logs) == logs_before

    def test_insufficient_shares(self, routed, vault, alice, shares_for):
        shares_for(alice, 10)
        vault.approve(routed.address, 100, sender=alice)
        with pytest.raises(InsufficientBalance):
            routed.redeem(vault.address, 100, alice, alice, 0, sender=alice)
        assert vault.balance_of(alice) == 10

    def test_exchange_rate_applies(self, routed, premium_vault, asset, owner, alice):
        routed.add_vault(premium_vault.address, sender=owner)
        asset.approve(routed.address, 1_000, sender=alice)
        shares = routed.deposit(premium_vault.address, 1_000, alice, 0, sender=alice)
        premium_vault.approve(routed.address, shares, sender=alice)

        assert routed.redeem(premium_vault.address, shares, alice, alice, 0, sender=alice) == 1_000
        assert asset.balance_of(alice) == 1_000_000


class TestQueuedRedeem:

    @pytest.fixture
    def queued(self, routed, async_vault, asset, owner, alice):
        routed.add_vault(async_vault.address, sender=owner)
        asset.approve(routed.address, 300, sender=alice)
        routed.deposit(async_vault.address, 300, alice, 0, sender=alice)
        async_vault.approve(routed.address, 300, sender=alice)
        return async_vault

    def test_queued_redeem_returns_zero(self, chain, routed, queued, asset, alice, bob):
        result = routed.redeem(queued.address, 120, bob, alice, 3, sender=alice)

        assert result == 0
        assert queued.balance_of(alice) == 180
        assert queued.balance_of(routed.address) == 0
        assert queued.balance_of(queued.address) == 120
        assert asset.balance_of(bob) == 0
        event = chain.events(GatewayRedeem)[-1]
        assert event.instant is False
        assert event.assets_or_request_id == 0

    def test_settlement_happens_outside_gateway(self, routed, queued, asset, owner, alice, bob):
        routed.redeem(queued.address, 120, bob, alice, 0, sender=alice)
        assert queued.pending_redeem_request(1).shares == 120

        assert queued.fulfill(1, sender=owner) == 120
        assert asset.balance_of(bob) == 120
        assert queued.pending_redeem_request(1) is None
