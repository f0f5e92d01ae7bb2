"""Content hashing for version deduplication."""

import hashlib


class ContentHasher:
    """Deterministic content digests.

    Digests are dedup keys within a single document, not integrity proofs.
    """

    @staticmethod
    def calculate_hash(content: str | bytes) -> str:
        """Calculate SHA-256 hash of content.

        Args:
            content: Content to hash (string or bytes)

        Returns:
            SHA-256 hash as hex string
        """
        if isinstance(content, str):
            content = content.encode("utf-8")

        hash_obj = hashlib.sha256(content)
        return hash_obj.hexdigest()
