"""Short code generation utilities."""

import secrets
import string
import uuid
from typing import Optional


class ShortCodeGenerator:
    """Generate URL-safe short codes for links."""

    # URL-safe alphabet (a-zA-Z0-9 plus '-' and '_'), 64 symbols
    ALPHABET = string.ascii_letters + string.digits + "-_"

    def __init__(self, default_length: int = 8):
        """Initialize short code generator.

        Args:
            default_length: Default length for generated codes
        """
        self.default_length = default_length

    def generate_random(self, length: Optional[int] = None) -> str:
        """Generate a random short code from a cryptographic source.

        Args:
            length: Length of the code (uses default if not specified)

        Returns:
            Random short code
        """
        length = length or self.default_length
        return ''.join(secrets.choice(self.ALPHABET) for _ in range(length))

    def generate_from_uuid(self, length: Optional[int] = None) -> str:
        """Generate short code from a random UUID.

        Args:
            length: Length of the code (uses default if not specified)

        Returns:
            Short code based on UUID
        """
        length = length or self.default_length

        # Low-order digits of a uuid4 are uniformly random
        code = self._int_to_alphabet(uuid.uuid4().int)

        return code[-length:].rjust(length, self.ALPHABET[0])

    def _int_to_alphabet(self, num: int) -> str:
        """Convert integer to a string over ALPHABET.

        Args:
            num: Integer to convert

        Returns:
            Encoded string
        """
        if num == 0:
            return self.ALPHABET[0]

        result = []
        base = len(self.ALPHABET)

        while num > 0:
            num, remainder = divmod(num, base)
            result.append(self.ALPHABET[remainder])

        return ''.join(reversed(result))

    @staticmethod
    def is_valid_format(code: str) -> bool:
        """Check if code only uses URL-safe characters.

        Args:
            code: Code to validate

        Returns:
            True if valid format
        """
        return bool(code) and all(c in ShortCodeGenerator.ALPHABET for c in code)
