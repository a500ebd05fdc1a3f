"""
Services for blobpub.

The publish/ subpackage holds the publish engine: template resolution,
target resolution, artifact filtering, key building and the upload
orchestrator.
"""
