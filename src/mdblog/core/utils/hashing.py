"""Content hashes used to detect edited posts"""

import hashlib


def sha256(text: str) -> str:
    """Hex SHA-256 of the UTF-8 encoded post source."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()
