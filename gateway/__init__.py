#!/usr/bin/env python3
"""
Vault Gateway Module
Allow-listed routing of deposits and redemptions into external vaults
"""

from .events import (
    GatewayDeposit, GatewayRedeem, OwnershipTransferred, OwnershipTransferStarted,
    VaultAdded, VaultAssetRefreshed, VaultRemoved,
)
from .guard import ReentrancyGuard
from .registry import VaultEntry
from .router import GatewayState, VaultGateway

__all__ = [
    'VaultGateway', 'GatewayState', 'VaultEntry', 'ReentrancyGuard',
    'VaultAdded', 'VaultRemoved', 'VaultAssetRefreshed',
    'OwnershipTransferStarted', 'OwnershipTransferred',
    'GatewayDeposit', 'GatewayRedeem',
]
