"""Symmetric encryption for third-party credentials stored in the database"""

import logging

from cryptography.fernet import Fernet, InvalidToken

logger = logging.getLogger(__name__)


def _cipher(key: str) -> Fernet:
    # Fernet raises ValueError unless key is 32 url-safe base64-encoded bytes
    return Fernet(key.encode() if isinstance(key, str) else key)


def symmetric_encrypt(text: str, key: str) -> str:
    """Encrypt a string for storage"""
    return _cipher(key).encrypt(text.encode()).decode()


def symmetric_decrypt(token: str, key: str) -> str:
    """Decrypt a stored string; raises ValueError on a bad key or tampered data"""
    try:
        return _cipher(key).decrypt(token.encode()).decode()
    except InvalidToken as e:
        logger.error("Failed to decrypt credential: invalid token or key")
        raise ValueError("Could not decrypt credential") from e
