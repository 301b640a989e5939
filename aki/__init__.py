"""Photo-to-image studio: prompt enhancement and image-to-image synthesis."""

__version__ = "1.0.0"
