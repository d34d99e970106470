"""
Random code generators.

All generators use the ``secrets`` module.
"""

from __future__ import annotations

import secrets
import string


def generate_otp_code(length: int = 6) -> str:
    """Generate a cryptographically secure numeric OTP.

    Args:
        length: Number of digits (default 6).

    Returns:
        String of random decimal digits (leading zeros preserved).
    """
    return "".join(secrets.choice(string.digits) for _ in range(length))


def generate_file_token(length: int = 16) -> str:
    """Generate a random hex string used to name stored uploads."""
    return secrets.token_hex(length)
