"""Update credential generation, hashing and verification."""

import secrets

import bcrypt

CREDENTIAL_BYTES = 32


def generate_credential() -> str:
    """
    Generate a new plaintext update credential.

    Returns:
        URL-safe base64 encoding of 32 random bytes
    """
    return secrets.token_urlsafe(CREDENTIAL_BYTES)


def hash_credential(credential: str) -> str:
    """
    Hash a credential using bcrypt.

    Args:
        credential: Plain text credential to hash

    Returns:
        Bcrypt hash of the credential
    """
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(credential.encode("utf-8"), salt)
    return hashed.decode("utf-8")


def verify_credential(credential: str, credential_hash: str) -> bool:
    """
    Verify a credential against its hash.

    The cost factor is read from the stored hash, so hashes created with
    an older cost keep verifying after the default changes.

    Args:
        credential: Plain text credential to verify
        credential_hash: Bcrypt hash to verify against

    Returns:
        True if the credential matches the hash, False otherwise
    """
    if not credential or not credential_hash:
        return False
    try:
        return bcrypt.checkpw(
            credential.encode("utf-8"), credential_hash.encode("utf-8")
        )
    except ValueError:
        # Malformed stored hash, or input longer than bcrypt accepts
        return False
