"""
Catalog API Layer.

This package handles all communication with the Monster Siren catalog API.
"""

from .client import MonsterSirenClient

__all__ = ["MonsterSirenClient"]
