"""
Synthetic transaction references for records that carry none.
"""

import secrets
import string
import time


class ReferenceGenerator:
    """Issues prefix + millisecond timestamp + random suffix references.

    One generator is used per batch; it remembers what it issued so two
    references generated in the same millisecond can never collide.
    """

    SUFFIX_ALPHABET = string.ascii_uppercase + string.digits
    SUFFIX_LENGTH = 7

    def __init__(self):
        self._issued: set[str] = set()

    def generate(self, prefix: str) -> str:
        while True:
            suffix = "".join(
                secrets.choice(self.SUFFIX_ALPHABET) for _ in range(self.SUFFIX_LENGTH)
            )
            reference = f"{prefix}{int(time.time() * 1000)}{suffix}"
            if reference not in self._issued:
                self._issued.add(reference)
                return reference

    @property
    def issued_count(self) -> int:
        return len(self._issued)
