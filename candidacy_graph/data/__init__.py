"""
Record snapshot package.

Loads rebuild input exported from the application record store.
"""

from .repository import RecordRepository

__all__ = ['RecordRepository']
