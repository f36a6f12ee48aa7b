"""Image fingerprinting and comparison."""

from __future__ import annotations

from . import ahash_engine
from .codec import encode
from .raster import RasterImage


class ImageHasher:
    """Encapsulates fingerprinting and the two image comparison policies.

    is_similar_to compares perceptual fingerprints; is_same_as compares
    encoded bytes. Neither takes ownership of its arguments.
    """

    def fingerprint(self, image: RasterImage) -> int:
        """Compute the 64-bit fingerprint of the image's current pixels.

        Args:
            image: RasterImage to fingerprint

        Returns:
            Integer in [0, 2**64)
        """
        return ahash_engine.create_hash(image.pixels)

    def is_similar_to(self, a: RasterImage, b: RasterImage) -> bool:
        """True when both fingerprints are exactly equal (no distance tolerance)."""
        return self.fingerprint(a) == self.fingerprint(b)

    def is_same_as(self, a: RasterImage, b: RasterImage) -> bool:
        """True when dimensions match and the encoded bytes are identical."""
        return a.size == b.size and encode(a) == encode(b)

    def get_metadata(self) -> dict[str, object]:
        """Get fingerprint algorithm metadata.

        Returns:
            Dictionary with algorithm type, version, and parameters
        """
        return ahash_engine.get_hash_meta()


# Module-level singleton for convenience
_default_hasher = ImageHasher()


def fingerprint(image: RasterImage) -> int:
    return _default_hasher.fingerprint(image)


def is_similar_to(a: RasterImage, b: RasterImage) -> bool:
    return _default_hasher.is_similar_to(a, b)


def is_same_as(a: RasterImage, b: RasterImage) -> bool:
    return _default_hasher.is_same_as(a, b)


def get_metadata() -> dict[str, object]:
    return _default_hasher.get_metadata()
