from fractions import Fraction

import pytest

from gateway.router import VaultGateway
from ledger import AsyncRedeemVault, Chain, ERC20, TokenizedVault


@pytest.fixture
def chain():
    return Chain()


@pytest.fixture
def owner(chain):
    return chain.new_account()


@pytest.fixture
def alice(chain):
    return chain.new_account()


@pytest.fixture
def bob(chain):
    return chain.new_account()


@pytest.fixture
def asset(chain, owner, alice):
    token = ERC20(chain, "Test Dollar", "tUSD", decimals=6, deployer=owner)
    token.mint(alice, 1_000_000, sender=owner)
    return token


@pytest.fixture
def vault(chain, owner, asset):
    return TokenizedVault(chain, asset.address, "Test Vault", "tvUSD", deployer=owner)


@pytest.fixture
def async_vault(chain, owner, asset):
    return AsyncRedeemVault(chain, asset.address, "Queued Vault", "qvUSD", deployer=owner)


@pytest.fixture
def premium_vault(chain, owner, asset):
    # one share is worth two underlying units
    return TokenizedVault(chain, asset.address, "Premium Vault", "pvUSD", deployer=owner, assets_per_share=Fraction(2))


@pytest.fixture
def gateway(chain, owner):
    return VaultGateway(chain, deployer=owner)


@pytest.fixture
def routed(gateway, vault, owner):
    """Gateway with the synchronous vault allow-listed"""
    gateway.add_vault(vault.address, sender=owner)
    return gateway


@pytest.fixture
def shares_for(routed, vault, asset):
    """Deposit through the gateway so ``holder`` owns ``amount`` shares"""
    def _deposit(holder, amount):
        asset.approve(routed.address, amount, sender=holder)
        return routed.deposit(vault.address, amount, holder, 0, sender=holder)
    return _deposit
