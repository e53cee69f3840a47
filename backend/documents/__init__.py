"""AI-assisted document checks."""

from .verification import DocumentVerifier, parse_data_uri

__all__ = ["DocumentVerifier", "parse_data_uri"]
