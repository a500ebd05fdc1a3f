"""
Click command implementations for blobpub CLI.

Each module corresponds to a blobpub command (e.g., publish.py
implements 'blobpub publish').
"""

from .publish import publish
from .targets import targets

# Commands registered with the main group
COMMANDS = [
    publish,
    targets,
]

__all__ = [
    "COMMANDS",
    "publish",
    "targets",
]
