"""
Random names for upload directories and temp descriptor files.
"""

from __future__ import annotations

import re
import secrets
from typing import Protocol, runtime_checkable

RANDOM_NAME_LENGTH = 16

# Must accept everything the default generator emits
HANDLE_PATTERN = re.compile(r"^[A-Za-z0-9]+$")


@runtime_checkable
class NameGenerator(Protocol):
    """Protocol for random file and directory name generators."""

    def random(self, length: int) -> str:
        """Return a random name of ``length`` characters."""
        ...


class HexNameGenerator:
    """Lower-case hex names from the OS CSPRNG."""

    def random(self, length: int) -> str:
        return secrets.token_hex((length + 1) // 2)[:length]


def is_safe_handle(handle: str) -> bool:
    return bool(HANDLE_PATTERN.fullmatch(handle))
