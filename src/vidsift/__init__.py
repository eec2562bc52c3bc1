"""vidsift: find near-duplicate videos by perceptual frame hashing."""

__version__ = "0.1.0"
