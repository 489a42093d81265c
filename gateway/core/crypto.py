from __future__ import annotations

import binascii
from typing import Mapping

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from gateway.core.config import iv_name, key_name
from gateway.core.errors import DecryptionError

KEY_BYTES = 32
IV_BYTES = 16


def _key_material(keyring: Mapping[str, str], key_ref: str, iv_ref: str) -> tuple[bytes, bytes]:
    key = keyring.get(key_ref)
    iv = keyring.get(iv_ref)
    if not key or not iv:
        raise DecryptionError(f"key/iv pair not configured: {key_ref}, {iv_ref}")

    key_b = key.encode("utf-8")
    iv_b = iv.encode("utf-8")
    if len(key_b) != KEY_BYTES or len(iv_b) != IV_BYTES:
        raise DecryptionError(f"key/iv pair has wrong size: {key_ref}, {iv_ref}")
    return key_b, iv_b


def encrypt_aes256_cbc(key: bytes, iv: bytes, plaintext: str) -> str:
    padder = padding.PKCS7(algorithms.AES.block_size).padder()
    raw = padder.update(plaintext.encode("utf-8")) + padder.finalize()
    encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
    return (encryptor.update(raw) + encryptor.finalize()).hex()


def decrypt_aes256_cbc(key: bytes, iv: bytes, ciphertext_hex: str) -> str:
    try:
        raw = bytes.fromhex(ciphertext_hex.strip())
        decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
        padded = decryptor.update(raw) + decryptor.finalize()
        unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
        return (unpadder.update(padded) + unpadder.finalize()).decode("utf-8")
    except (ValueError, binascii.Error, UnicodeDecodeError) as e:
        raise DecryptionError("malformed ciphertext") from e


class CredentialDecryptor:
    """
    Decrypts at-rest credentials with the key/IV pair configured for each field.

    The keyring is injected (see `build_keyring`) so callers never read
    process-wide state directly.
    """

    def __init__(self, keyring: Mapping[str, str]):
        self._keyring = dict(keyring)

    def decrypt(self, key_ref: str, iv_ref: str, ciphertext: bytes) -> str:
        key, iv = _key_material(self._keyring, key_ref, iv_ref)
        try:
            text = ciphertext.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecryptionError("ciphertext is not text encoded") from e
        return decrypt_aes256_cbc(key, iv, text)

    def decrypt_field(self, ref: str, ciphertext: bytes) -> str:
        return self.decrypt(key_name(ref), iv_name(ref), ciphertext)

    def encrypt_field(self, ref: str, plaintext: str) -> bytes:
        key, iv = _key_material(self._keyring, key_name(ref), iv_name(ref))
        return encrypt_aes256_cbc(key, iv, plaintext).encode("utf-8")
