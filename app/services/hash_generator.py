"""Random code generation for link hashes."""

import secrets
from typing import Optional

from app.core.config import settings


class HashGenerator:
    """
    Produces random fixed-length codes from a URL-safe alphabet.

    Codes are not guaranteed to be unique; callers check them against the
    link store and draw again on collision.
    """

    def __init__(self, length: Optional[int] = None, alphabet: Optional[str] = None):
        self.length = length or settings.LINK_HASH_LENGTH
        self.alphabet = alphabet or settings.LINK_HASH_ALPHABET
        if self.length < 1:
            raise ValueError("Hash length must be positive")

    def generate(self) -> str:
        return "".join(secrets.choice(self.alphabet) for _ in range(self.length))
