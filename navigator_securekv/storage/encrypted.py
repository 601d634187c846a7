"""
EncryptedStorage — authenticated encryption on top of any SecureStorage.

Each blob is encrypted with a key derived from the active master key version;
the version travels with the blob, so previous versions stay readable until
``rotate()`` re-encrypts them.

Security Note:
    Never log plaintext or ciphertext values. Only log key names and versions.
"""
import logging
from typing import Iterable, Optional

from ..conf import LOGGER_NAME
from .base import SecureStorage
from .crypto import blob_key_id, decrypt_blob, encrypt_blob
from .keyring import Keyring

logger = logging.getLogger(LOGGER_NAME)


class EncryptedStorage(SecureStorage):
    """Encrypting wrapper around another storage adapter.

    Args:
        inner: storage that receives the ciphertext.
        keyring: master keys and cipher; loaded from the environment
            when omitted.
    """

    def __init__(self, inner: SecureStorage, keyring: Optional[Keyring] = None):
        self._inner = inner
        self._keyring = keyring or Keyring.from_env()
        self._cipher_cls = self._keyring.cipher_cls

    @property
    def active_key_id(self) -> int:
        return self._keyring.active_key_id

    async def put(self, key: str, data: bytes) -> None:
        ciphertext = encrypt_blob(
            data,
            self._keyring.active_key_id,
            self._keyring.active_key,
            self._cipher_cls,
        )
        await self._inner.put(key, ciphertext)

    async def get(self, key: str) -> Optional[bytes]:
        ciphertext = await self._inner.get(key)
        if ciphertext is None:
            return None
        return decrypt_blob(ciphertext, self._keyring.master_keys, self._cipher_cls)

    async def delete(self, key: str) -> None:
        await self._inner.delete(key)

    async def close(self) -> None:
        await self._inner.close()

    async def rotate(self, keys: Iterable[str], new_key_id: int) -> dict:
        """Re-encrypt the given keys under master key ``new_key_id``.

        Keys already at the target version, or not present, are skipped.
        The operation is idempotent and the new key becomes the active one.

        Args:
            keys: physical storage keys to re-encrypt.
            new_key_id: target key version.

        Returns:
            Stats dict with keys: total, rotated, errors, skipped.

        Raises:
            KeyError: If new_key_id is not in the keyring.
        """
        target = self._keyring.activate(new_key_id)
        stats = {"total": 0, "rotated": 0, "errors": 0, "skipped": 0}
        logger.info("Starting key rotation to v%d", new_key_id)
        for key in keys:
            stats["total"] += 1
            try:
                ciphertext = await self._inner.get(key)
                if ciphertext is None or blob_key_id(ciphertext) == new_key_id:
                    stats["skipped"] += 1
                    continue
                plaintext = decrypt_blob(
                    ciphertext, self._keyring.master_keys, self._cipher_cls
                )
                await self._inner.put(
                    key,
                    encrypt_blob(
                        plaintext, new_key_id, target.active_key, self._cipher_cls
                    ),
                )
                stats["rotated"] += 1
            except Exception as err:  # pylint: disable=W0718
                logger.error("Error rotating key=%s: %s", key, err)
                stats["errors"] += 1
        self._keyring = target
        logger.info("Key rotation complete: %s", stats)
        return stats
