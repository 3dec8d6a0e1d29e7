"""Schema definitions for manifest and gallery payloads."""

from .gallery import Publisher
from .manifest import AssetDeclaration

__all__ = [
    "AssetDeclaration",
    "Publisher",
]
