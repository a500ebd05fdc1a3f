"""
blobpub - publish release artifacts to object storage buckets.

Resolves the configured blob targets of a release, picks the artifacts
each one should receive and uploads them under predictable keys.
"""

__version__ = "0.1.0"
