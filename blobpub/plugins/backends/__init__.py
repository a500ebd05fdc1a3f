"""
Storage backend plugins.

Provides implementations for the supported blob stores. Modules here are
scanned at bootstrap; every concrete IBlobBackend they define is
registered under its provider name.
"""

from .base import BaseBlobBackend, BaseBucket

__all__ = [
    "BaseBlobBackend",
    "BaseBucket",
]
