"""
Encryption of private keys at rest with libsodium secretbox.
"""
import os
import base64
import json
import logging
from typing import Dict, Any

import keyring
import nacl.exceptions
import nacl.secret
import nacl.utils
from keyring.errors import KeyringError

logger = logging.getLogger(__name__)

KEYRING_SERVICE = "earnwallet-sdk"
KEYRING_KEY_NAME = "master-key"

FORMAT_VERSION = 1

_encryption_key_cache = None


def _in_ci() -> bool:
    return os.environ.get("CI") == "true"


def get_encryption_key() -> bytes:
    """
    Get the 32-byte master key.

    Looks in the OS keyring first and, in CI only, in EARNWALLET_MASTER_KEY
    (base64). A missing key is generated and stored in the keyring. The key is
    cached after the first lookup.

    Raises:
        ValueError: If no key is available and none can be stored
    """
    global _encryption_key_cache
    if _encryption_key_cache is not None:
        return _encryption_key_cache

    key = None
    try:
        stored = keyring.get_password(KEYRING_SERVICE, KEYRING_KEY_NAME)
        if stored:
            key = base64.b64decode(stored)
    except KeyringError as e:
        logger.debug(f"Keyring access failed: {e}")

    if not key and _in_ci():
        env_key = os.environ.get("EARNWALLET_MASTER_KEY")
        if env_key:
            try:
                key = base64.b64decode(env_key)
            except ValueError:
                logger.warning("Invalid EARNWALLET_MASTER_KEY format")

    if not key:
        key = nacl.utils.random(nacl.secret.SecretBox.KEY_SIZE)
        try:
            keyring.set_password(KEYRING_SERVICE, KEYRING_KEY_NAME, base64.b64encode(key).decode("ascii"))
        except KeyringError as e:
            if not _in_ci():
                raise ValueError("Failed to store encryption key in OS keyring and not in CI environment") from e
            logger.warning("Keyring unavailable; set EARNWALLET_MASTER_KEY to reuse keys across CI runs")

    if len(key) != nacl.secret.SecretBox.KEY_SIZE:
        raise ValueError(f"Master key must be {nacl.secret.SecretBox.KEY_SIZE} bytes")

    _encryption_key_cache = key
    return key


def encrypt_key_data(data: Dict[str, Any]) -> Dict[str, Any]:
    """Encrypt a JSON-serializable dict; nonce and MAC are embedded in the output"""
    box = nacl.secret.SecretBox(get_encryption_key())
    encrypted = box.encrypt(json.dumps(data).encode("utf-8"))
    return {
        "encrypted": base64.b64encode(encrypted).decode("ascii"),
        "version": FORMAT_VERSION,
    }


def decrypt_key_data(encrypted_data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Decrypt data produced by encrypt_key_data().

    Raises:
        ValueError: If the data cannot be decrypted
    """
    box = nacl.secret.SecretBox(get_encryption_key())
    try:
        decrypted = box.decrypt(base64.b64decode(encrypted_data["encrypted"]))
        return json.loads(decrypted.decode("utf-8"))
    except (KeyError, ValueError, nacl.exceptions.CryptoError) as e:
        raise ValueError(f"Failed to decrypt key data: {e}") from e
