"""OAuth provider strategies.

This module contains concrete implementations of provider strategies.
"""

from .brightspace import BrightspaceStrategy, parse_profile

__all__ = [
    "BrightspaceStrategy",
    "parse_profile",
]
