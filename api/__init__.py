#!/usr/bin/env python3
"""
Gateway API Module
Read-only HTTP surface over a vault gateway
"""

from .gateway_api import create_app

__all__ = ['create_app']
