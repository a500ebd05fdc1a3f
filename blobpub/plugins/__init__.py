"""
Plugin system for blobpub.

Built-in storage backends live in blobpub.plugins.backends and are
registered automatically at bootstrap.
"""
