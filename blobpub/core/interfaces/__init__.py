"""
Interface definitions for blobpub.

Abstract base classes and protocols the publish core depends on.
Concrete implementations live in blobpub.plugins and blobpub.services.
"""

from .backend import IBlobBackend, IBucket
from .logger import ILogger
from .templates import ITemplateRenderer

__all__ = [
    "IBlobBackend",
    "IBucket",
    "ILogger",
    "ITemplateRenderer",
]
