from __future__ import annotations


class EncodingSpecError(ValueError):
    """Raised when a declarative encoding cannot be turned into channel encoders."""
