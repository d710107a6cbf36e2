#!/usr/bin/env python3
"""
Ledger Module
In-process execution environment, transferable tokens and reference vaults
"""

from .chain import Chain, LogEntry, NoContract, Revert
from .contract import Contract, external, view
from .token import (
    ERC20, NoReturnERC20, ZeroFirstApproveERC20, FalseReturningERC20,
    InsufficientBalance, InsufficientAllowance,
)
from .vaults import (
    TokenizedVault, AsyncRedeemVault, BrokenAssetVault, PartialDepositVault, ReentrantVault,
)

__all__ = [
    'Chain', 'LogEntry', 'NoContract', 'Revert',
    'Contract', 'external', 'view',
    'ERC20', 'NoReturnERC20', 'ZeroFirstApproveERC20', 'FalseReturningERC20',
    'InsufficientBalance', 'InsufficientAllowance',
    'TokenizedVault', 'AsyncRedeemVault', 'BrokenAssetVault', 'PartialDepositVault', 'ReentrantVault',
]
