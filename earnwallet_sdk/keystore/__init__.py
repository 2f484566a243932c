"""
Local persistence for embedded wallet keys and the user directory.
"""
from .store import KeyStore
from .crypto import encrypt_key_data, decrypt_key_data, get_encryption_key

__all__ = ["KeyStore", "encrypt_key_data", "decrypt_key_data", "get_encryption_key"]
