"""
Storage Crypto — key derivation and authenticated encryption of stored blobs.

Blob format: [key_id 2B uint16 BE][nonce 12B][encrypted_payload + tag 16B]

Security Note:
    Never log plaintext or ciphertext values.
    Nonces are random 96-bit; collision probability negligible under normal usage.
"""
import os
import struct
import logging

from cryptography.hazmat.primitives.kdf.hkdf import HKDF
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM, ChaCha20Poly1305

from ..conf import LOGGER_NAME, CIPHER_BACKEND

logger = logging.getLogger(LOGGER_NAME)

NONCE_SIZE = 12  # 96-bit nonce
KEY_ID_SIZE = 2  # uint16 big-endian
KEY_LENGTH = 32  # AES-256
TAG_SIZE = 16

_CIPHERS = {
    "aesgcm": AESGCM,
    "chacha20": ChaCha20Poly1305,
}


def get_cipher_cls(backend: str = CIPHER_BACKEND) -> type:
    """Return the AEAD cipher class for a backend name.

    Raises:
        ValueError: If the backend is not supported.
    """
    try:
        return _CIPHERS[backend.lower()]
    except KeyError:
        raise ValueError(f"Unsupported cipher backend: {backend}") from None


def derive_key(seed: bytes, context: str) -> bytes:
    """Derive a 32-byte encryption key using HKDF-SHA256.

    Args:
        seed: Input key material (master key bytes).
        context: Context string for domain separation (e.g. "securekv-v1").

    Returns:
        32-byte derived key.
    """
    hkdf = HKDF(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=None,
        info=context.encode("utf-8"),
    )
    return hkdf.derive(seed)


def _context(key_id: int) -> str:
    return f"securekv-v{key_id}"


def encrypt_blob(
    plaintext: bytes,
    key_id: int,
    master_key: bytes,
    cipher_cls: type = AESGCM,
) -> bytes:
    """Encrypt a blob with embedded key version.

    Args:
        plaintext: Data to encrypt.
        key_id: Master key version identifier.
        master_key: Raw 32-byte master key for this version.
        cipher_cls: AEAD cipher class.

    Returns:
        Ciphertext with key_id prefix.
    """
    derived = derive_key(master_key, _context(key_id))
    cipher = cipher_cls(derived)
    nonce = os.urandom(NONCE_SIZE)
    ct = cipher.encrypt(nonce, plaintext, None)
    return struct.pack("!H", key_id) + nonce + ct


def blob_key_id(ciphertext: bytes) -> int:
    """Return the key version embedded in a ciphertext blob."""
    if len(ciphertext) < KEY_ID_SIZE:
        raise ValueError("ciphertext too short to hold a key id")
    return struct.unpack("!H", ciphertext[:KEY_ID_SIZE])[0]


def decrypt_blob(
    ciphertext: bytes,
    master_keys: dict[int, bytes],
    cipher_cls: type = AESGCM,
) -> bytes:
    """Decrypt a blob using its embedded key version.

    Args:
        ciphertext: Blob in format [key_id 2B][nonce 12B][payload+tag].
        master_keys: Mapping of key_id to raw 32-byte master key.
        cipher_cls: AEAD cipher class.

    Returns:
        Decrypted plaintext bytes.

    Raises:
        ValueError: If the blob is too short.
        KeyError: If the embedded key_id is not in master_keys.
        cryptography.exceptions.InvalidTag: If authentication fails.
    """
    _min = KEY_ID_SIZE + NONCE_SIZE + TAG_SIZE
    if len(ciphertext) < _min:
        raise ValueError(
            f"ciphertext too short: {len(ciphertext)} bytes (minimum {_min})"
        )
    key_id = blob_key_id(ciphertext)
    if key_id not in master_keys:
        raise KeyError(
            f"Master key version {key_id} not found in provided keys"
        )
    derived = derive_key(master_keys[key_id], _context(key_id))
    cipher = cipher_cls(derived)
    nonce = ciphertext[KEY_ID_SIZE:KEY_ID_SIZE + NONCE_SIZE]
    return cipher.decrypt(nonce, ciphertext[KEY_ID_SIZE + NONCE_SIZE:], None)
