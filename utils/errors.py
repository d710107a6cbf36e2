#!/usr/bin/env python3
"""
Custom error classes for the vault gateway
"""


class GatewayError(Exception):
    """Base exception for gateway failures"""
    pass


class UnauthorizedError(GatewayError):
    """Operation not authorized"""
    pass


class NotOwner(UnauthorizedError):
    """Caller is not the gateway owner"""
    pass


class NotPendingOwner(UnauthorizedError):
    """Caller is not the pending owner"""
    pass


class ValidationError(GatewayError):
    """Input validation failed"""
    pass


class ZeroAddress(ValidationError):
    """A required identity was the null address"""
    pass


class ZeroReceiver(ValidationError):
    """Receiver was the null address"""
    pass


class InvalidReceiver(ValidationError):
    """Receiver would leave value parked on the gateway itself"""
    pass


class ZeroAmount(ValidationError):
    """Amount or share count was zero"""
    pass


class NoCode(ValidationError):
    """Identity does not resolve to a deployed contract"""
    pass


class InvalidAddress(ValidationError):
    """Value is not a well-formed address"""
    pass


class PolicyError(GatewayError):
    """Routing policy rejected the operation"""
    pass


class VaultNotAllowed(PolicyError):
    """Vault is not on the allow-list"""
    pass


class AssetUnresolved(PolicyError):
    """Underlying asset of a vault could not be resolved"""
    pass


class ReentrantCall(GatewayError):
    """A mutating entry point was re-entered while another was in flight"""
    pass


class TransferFailed(GatewayError):
    """Token reported failure without reverting"""
    pass
