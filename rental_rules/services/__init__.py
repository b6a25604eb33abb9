"""
Services package for the rental rules engine.

Contains side-effecting operations around the pure engine, such as
publishing compiled client manifests.
"""

from rental_rules.services.manifest_publisher import publish_manifest

__all__ = ["publish_manifest"]
