"""Identifier generation."""
import secrets
import string

from app.constants import SITE_ID_LENGTH

_ALPHABET = string.ascii_letters + string.digits


def generate_site_id(length: int = SITE_ID_LENGTH) -> str:
    """
    Generate a random site identifier.

    62 symbols over 20 positions gives ~119 bits, so collisions within an
    owner's collection are not a practical concern.

    Args:
        length: Number of characters

    Returns:
        A random alphanumeric identifier
    """
    return "".join(secrets.choice(_ALPHABET) for _ in range(length))
