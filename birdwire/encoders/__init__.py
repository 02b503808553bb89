"""
Variant-specific command frame encoders.
"""

from birdwire.encoders.base import CommandEncoder
from birdwire.encoders.finch import FinchEncoder
from birdwire.encoders.hummingbird import HummingbirdEncoder

__all__ = [
    "CommandEncoder",
    "FinchEncoder",
    "HummingbirdEncoder",
]
