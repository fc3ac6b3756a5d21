"""Credential Vault - decrypts wallet seeds and resolves opaque credential handles.

Invariants:
    - Secrets exist in cleartext only in the return value of decrypt_seed/open_credential
    - Every failure (wrong passphrase, truncated blob, tampered token) raises CredentialError
    - Error messages never echo the passphrase, the seed or the handle

Design Decisions:
    - Seed blob = urlsafe_b64(salt[16] | nonce[12] | AES-256-GCM ciphertext), key from scrypt:
      the passphrase never leaves this module and GCM authenticates the ciphertext
    - Credential handles are Fernet tokens under a vault master key: the record stores
      an opaque string, the vault is the only thing that can turn it back into a secret
"""

import base64
import binascii
import logging
import os

from cryptography.exceptions import InvalidTag
from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

from backstop.core.domain_types import CredentialHandle
from backstop.core.errors import CredentialError

logger = logging.getLogger(__name__)

_SALT_BYTES = 16
_NONCE_BYTES = 12
_KEY_BYTES = 32


class ScryptCredentialVault:
    """AES-GCM seed encryption with scrypt key derivation; Fernet credential handles."""

    def __init__(
        self,
        master_key: str | bytes,
        scrypt_n: int = 2**14,
        scrypt_r: int = 8,
        scrypt_p: int = 1,
    ):
        self._fernet = Fernet(master_key)
        self.scrypt_n = scrypt_n
        self.scrypt_r = scrypt_r
        self.scrypt_p = scrypt_p

    def _derive_key(self, passphrase: str, salt: bytes) -> bytes:
        kdf = Scrypt(
            salt=salt, length=_KEY_BYTES,
            n=self.scrypt_n, r=self.scrypt_r, p=self.scrypt_p,
        )
        try:
            secret = passphrase.encode("utf-8")
        except UnicodeEncodeError:
            raise CredentialError("Passphrase is not valid text")
        return kdf.derive(secret)

    # ─── Seeds ───────────────────────────────────────────────────

    def encrypt_seed(self, seed: str, passphrase: str) -> str:
        """Encrypt a signing seed under a passphrase. Used by wallet creation."""
        salt = os.urandom(_SALT_BYTES)
        nonce = os.urandom(_NONCE_BYTES)
        key = self._derive_key(passphrase, salt)
        ciphertext = AESGCM(key).encrypt(nonce, seed.encode("utf-8"), None)
        return base64.urlsafe_b64encode(salt + nonce + ciphertext).decode("ascii")

    def decrypt_seed(self, encrypted_seed: str, passphrase: str) -> str:
        """Recover the signing seed; CredentialError on any failure."""
        try:
            blob = base64.urlsafe_b64decode(encrypted_seed.encode("ascii"))
        except (binascii.Error, ValueError, UnicodeEncodeError):
            raise CredentialError("Encrypted seed is not valid base64")
        if len(blob) <= _SALT_BYTES + _NONCE_BYTES:
            raise CredentialError("Encrypted seed is truncated")

        salt = blob[:_SALT_BYTES]
        nonce = blob[_SALT_BYTES:_SALT_BYTES + _NONCE_BYTES]
        ciphertext = blob[_SALT_BYTES + _NONCE_BYTES:]
        key = self._derive_key(passphrase, salt)
        try:
            seed = AESGCM(key).decrypt(nonce, ciphertext, None)
        except InvalidTag:
            logger.warning("Seed decryption failed: wrong passphrase or corrupt seed")
            raise CredentialError("Wrong passphrase or corrupt seed")
        return seed.decode("utf-8")

    # ─── Credential handles ──────────────────────────────────────

    def seal_credential(self, secret: str) -> CredentialHandle:
        """Wrap a secret into an opaque handle safe to persist on a record."""
        return CredentialHandle(
            self._fernet.encrypt(secret.encode("utf-8")).decode("ascii"),
        )

    def open_credential(self, handle: CredentialHandle) -> str:
        """Resolve a handle at the moment of use."""
        try:
            return self._fernet.decrypt(handle.encode("ascii")).decode("utf-8")
        except (InvalidToken, UnicodeEncodeError):
            raise CredentialError("Credential handle cannot be resolved")
