#!/usr/bin/env python3
"""
In-memory demo environment: one asset, a synchronous and a queued vault,
and a gateway routing to both.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict

from common.metrics import GatewayMetrics, TimerContext
from ledger import AsyncRedeemVault, Chain, ERC20, TokenizedVault

from .router import VaultGateway

logger = logging.getLogger(__name__)


@dataclass
class DemoEnvironment:
    chain: Chain
    gateway: VaultGateway
    asset: ERC20
    vault: TokenizedVault
    async_vault: AsyncRedeemVault
    metrics: GatewayMetrics
    owner: str
    alice: str
    bob: str


def build_demo_environment(initial_balance: int = 1_000_000) -> DemoEnvironment:
    chain = Chain()
    owner, alice, bob = chain.new_account(), chain.new_account(), chain.new_account()

    asset = ERC20(chain, "Demo Dollar", "dUSD", decimals=6, deployer=owner)
    vault = TokenizedVault(chain, asset.address, "Demo Vault", "dvUSD", deployer=owner)
    async_vault = AsyncRedeemVault(chain, asset.address, "Demo Queued Vault", "dqUSD", deployer=owner)

    gateway = VaultGateway(chain, deployer=owner)
    metrics = GatewayMetrics(gateway.address).attach(chain)
    gateway.add_vault(vault.address, sender=owner)
    gateway.add_vault(async_vault.address, sender=owner)

    asset.mint(alice, initial_balance, sender=owner)
    logger.info(f"Demo environment ready: gateway={gateway.address} vaults={gateway.get_vaults()}")
    return DemoEnvironment(chain, gateway, asset, vault, async_vault, metrics, owner, alice, bob)


def run_demo(env: DemoEnvironment, amount: int = 1_000, partner_id: int = 7) -> Dict[str, Any]:
    """
    Walk through the routing flows

    1. Alice deposits into the synchronous vault
    2. Bob redeems half of Alice's shares on her behalf, paid to himself
    3. Alice deposits into the queued vault and redeems, then the operator settles
    """
    gw, timers = env.gateway, env.metrics.collector

    env.asset.approve(gw.address, 2 * amount, sender=env.alice)
    with TimerContext(timers, "demo.deposit"):
        shares = gw.deposit(env.vault.address, amount, env.alice, partner_id, sender=env.alice)

    env.vault.approve(gw.address, shares // 2, sender=env.alice)
    with TimerContext(timers, "demo.redeem"):
        paid = gw.redeem(env.vault.address, shares // 2, env.bob, env.alice, partner_id, sender=env.bob)

    queued_shares = gw.deposit(env.async_vault.address, amount, env.alice, partner_id, sender=env.alice)
    env.async_vault.approve(gw.address, queued_shares, sender=env.alice)
    queued = gw.redeem(env.async_vault.address, queued_shares, env.alice, env.alice, partner_id, sender=env.alice)
    settled = env.async_vault.fulfill(1, sender=env.owner)

    return {
        "gateway": gw.address,
        "vaults": gw.get_vaults(),
        "results": {
            "deposit_shares": shares,
            "instant_redeem_assets": paid,
            "queued_redeem_result": queued,
            "settled_assets": settled,
        },
        "balances": {
            "alice_asset": env.asset.balance_of(env.alice),
            "alice_shares": env.vault.balance_of(env.alice),
            "bob_asset": env.asset.balance_of(env.bob),
            "gateway_asset": env.asset.balance_of(gw.address),
            "gateway_shares": env.vault.balance_of(gw.address),
        },
        "events": [e.to_dict() for e in env.chain.events(address=gw.address)],
        "metrics": env.metrics.collector.get_summary(),
    }
