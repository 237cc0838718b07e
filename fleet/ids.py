"""Short random record ids."""

import secrets
import string

ID_ALPHABET = string.ascii_lowercase + string.digits
ID_LENGTH = 10


def new_id(length: int = ID_LENGTH) -> str:
    """Generate a random lowercase alphanumeric id."""
    return "".join(secrets.choice(ID_ALPHABET) for _ in range(length))
