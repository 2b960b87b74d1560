"""Utility modules"""
from .persistence import PersistentStore

__all__ = [
    'PersistentStore'
]
