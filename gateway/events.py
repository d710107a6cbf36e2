#!/usr/bin/env python3
"""
Events emitted by the vault gateway
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional


class GatewayEvent:
    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["event"] = type(self).__name__
        return data


@dataclass(frozen=True)
class VaultAdded(GatewayEvent):
    vault: str
    asset: Optional[str]


@dataclass(frozen=True)
class VaultRemoved(GatewayEvent):
    vault: str


@dataclass(frozen=True)
class VaultAssetRefreshed(GatewayEvent):
    vault: str
    old_asset: Optional[str]
    new_asset: str


@dataclass(frozen=True)
class OwnershipTransferStarted(GatewayEvent):
    owner: str
    pending_owner: str


@dataclass(frozen=True)
class OwnershipTransferred(GatewayEvent):
    previous_owner: str
    new_owner: str


@dataclass(frozen=True)
class GatewayDeposit(GatewayEvent):
    partner_id: int
    vault: str
    caller: str
    receiver: str
    assets: int
    shares: int


@dataclass(frozen=True)
class GatewayRedeem(GatewayEvent):
    partner_id: int
    vault: str
    shares_owner: str
    receiver: str
    shares: int
    assets_or_request_id: int
    instant: bool
