#!/usr/bin/env python3
"""
Input validation utilities for gateway calls
"""
from web3 import Web3

from .errors import InvalidAddress, ValidationError


ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
MAX_UINT256 = 2 ** 256 - 1


def validate_address(address, name: str = "address") -> str:
    """Validate a hex address and return its checksummed form"""
    if address is None:
        return ZERO_ADDRESS

    if not isinstance(address, str) or not Web3.is_address(address):
        raise InvalidAddress(f"{name} is not a valid address: {address!r}")

    return Web3.to_checksum_address(address)


def is_zero_address(address: str) -> bool:
    return address is None or int(address, 16) == 0


def validate_uint(value, name: str = "amount") -> int:
    """Validate an unsigned 256-bit integer quantity"""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{name} must be an integer")

    if value < 0 or value > MAX_UINT256:
        raise ValidationError(f"{name} out of uint256 range")

    return value
