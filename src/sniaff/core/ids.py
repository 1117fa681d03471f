"""Session ID generation.

IDs look like "sniaff-a1b2c3d4": a fixed prefix plus 4 random bytes in hex.
Uniqueness is probabilistic (2^32 values); collisions are not checked.
"""

import re
import secrets

from sniaff.core.errors import CoreError, ErrorCode

SESSION_ID_PREFIX = "sniaff"

_SESSION_ID_RE = re.compile(rf"^{SESSION_ID_PREFIX}-[0-9a-f]{{8}}$")


def generate_session_id() -> str:
    """Generate a fresh session ID.

    Returns:
        A new ID of the form "sniaff-xxxxxxxx".

    Raises:
        CoreError: INTERNAL_ERROR if the OS random source is unavailable.
    """
    try:
        random_part = secrets.token_hex(4)
    except (NotImplementedError, OSError) as e:
        raise CoreError(
            ErrorCode.INTERNAL_ERROR,
            f"Failed to generate session ID: {e}",
        ) from e
    return f"{SESSION_ID_PREFIX}-{random_part}"


def is_session_id(name: str) -> bool:
    """Check whether a name follows the session ID convention."""
    return _SESSION_ID_RE.fullmatch(name) is not None
