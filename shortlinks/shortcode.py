"""Short code generation utilities."""

import random
import string
from typing import Optional

from .common.validators import SHORT_CODE_MAX_LENGTH, SHORT_CODE_MIN_LENGTH


class ShortCodeGenerator:
    """Generate random base62 short codes.

    Codes come from the OS random source. At the default length of 6 there are
    62**6 (about 5.7e10) possible codes, so collisions are rare; the store
    still checks every candidate before inserting it.
    """

    # Base62 characters (alphanumeric, case-sensitive)
    BASE62_CHARS = string.ascii_letters + string.digits  # a-zA-Z0-9

    def __init__(self, default_length: int = 6, rng: Optional[random.Random] = None):
        """Initialize short code generator.

        Args:
            default_length: Default length for generated codes (4-10)
            rng: Optional random source (defaults to random.SystemRandom)
        """
        if not SHORT_CODE_MIN_LENGTH <= default_length <= SHORT_CODE_MAX_LENGTH:
            raise ValueError(
                f"default_length must be between {SHORT_CODE_MIN_LENGTH} "
                f"and {SHORT_CODE_MAX_LENGTH}, got {default_length}"
            )
        self.default_length = default_length
        self.rng = rng or random.SystemRandom()

    def generate(self, length: Optional[int] = None) -> str:
        """Generate a random short code.

        Args:
            length: Length of the code (uses default if not specified)

        Returns:
            Random short code
        """
        length = length or self.default_length
        return ''.join(self.rng.choices(self.BASE62_CHARS, k=length))

