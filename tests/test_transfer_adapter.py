import pytest

from gateway.transfer import force_approve, safe_transfer, safe_transfer_from
from ledger import (
    ERC20, FalseReturningERC20, InsufficientBalance, NoReturnERC20, Revert, ZeroFirstApproveERC20,
)
from ledger.token import Approval
from utils.errors import TransferFailed


@pytest.fixture
def make_token(chain, owner, alice):
    def _make(cls):
        token = cls(chain, "Token", "TKN", deployer=owner)
        token.mint(alice, 1_000, sender=owner)
        return token
    return _make


@pytest.mark.parametrize("cls", [ERC20, NoReturnERC20, FalseReturningERC20])
def test_successful_transfers(make_token, alice, bob, cls):
    token = make_token(cls)
    safe_transfer(token, bob, 100, sender=alice)
    token.approve(bob, 50, sender=alice)
    safe_transfer_from(token, alice, bob, 50, sender=bob)
    assert token.balance_of(bob) == 150


def test_false_return_raises(make_token, alice, bob):
    token = make_token(FalseReturningERC20)
    with pytest.raises(TransferFailed):
        safe_transfer(token, bob, 10_000, sender=alice)
    with pytest.raises(TransferFailed):
        safe_transfer_from(token, alice, bob, 10, sender=bob)


def test_revert_propagates_verbatim(make_token, alice, bob):
    token = make_token(NoReturnERC20)
    with pytest.raises(InsufficientBalance):
        safe_transfer(token, bob, 10_000, sender=alice)


def test_force_approve_over_existing_allowance(make_token, alice, bob):
    token = make_token(ZeroFirstApproveERC20)
    token.approve(bob, 10, sender=alice)
    with pytest.raises(Revert):
        token.approve(bob, 20, sender=alice)

    force_approve(token, bob, 20, sender=alice)
    assert token.allowance(alice, bob) == 20


def test_force_approve_zero_is_single_call(chain, make_token, alice, bob):
    token = make_token(ERC20)
    force_approve(token, bob, 0, sender=alice)
    assert chain.events(Approval, address=token.address) == [Approval(alice, bob, 0)]

    force_approve(token, bob, 5, sender=alice)
    assert chain.events(Approval, address=token.address)[-2:] == [Approval(alice, bob, 0), Approval(alice, bob, 5)]
