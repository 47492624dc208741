"""Master key cache backed by the OS secret store.

The derived master key is the only secret that reaches durable storage, and
only here: a single keyring entry, overwritten on every store. An empty
entry is the locked state.
"""
from __future__ import annotations
import base64, binascii, logging
from abc import ABC, abstractmethod
from typing import Optional
import keyring
from keyring.errors import KeyringError, PasswordDeleteError
from config.settings import KEYRING_SERVICE, KEYRING_USERNAME, KEY_LENGTH
from .errors import CorruptionError, InvalidKeyError, StorageError

log = logging.getLogger(__name__)

class SecretCache(ABC):
	"""Capability to keep the derived master key between operations."""

	@abstractmethod
	def store(self, key: bytes) -> None: ...

	@abstractmethod
	def load(self) -> Optional[bytes]:
		"""Return the cached key, or None when locked."""

	@abstractmethod
	def clear(self) -> None: ...

class KeyringSecretCache(SecretCache):
	def __init__(self, service: str = KEYRING_SERVICE, username: str = KEYRING_USERNAME):
		self.service = service
		self.username = username

	def store(self, key: bytes) -> None:
		if len(key) != KEY_LENGTH:
			raise InvalidKeyError(f'Master key must be {KEY_LENGTH} bytes')
		encoded = base64.b64encode(key).decode('ascii')
		try:
			keyring.set_password(self.service, self.username, encoded)
		except KeyringError as e:
			raise StorageError(f'Cannot store master key: {e}') from e
		log.debug('master key cached in keyring service=%s', self.service)

	def load(self) -> Optional[bytes]:
		try:
			encoded = keyring.get_password(self.service, self.username)
		except KeyringError as e:
			raise StorageError(f'Cannot read master key: {e}') from e
		if encoded is None:
			return None
		try:
			key = base64.b64decode(encoded, validate=True)
		except (binascii.Error, ValueError) as e:
			raise CorruptionError(f'Cached master key is not valid base64: {e}') from e
		if len(key) != KEY_LENGTH:
			raise CorruptionError(f'Cached master key has {len(key)} bytes, expected {KEY_LENGTH}')
		return key

	def clear(self) -> None:
		try:
			keyring.delete_password(self.service, self.username)
		except PasswordDeleteError:
			# nothing cached
			return
		except KeyringError as e:
			raise StorageError(f'Cannot clear master key: {e}') from e
		log.info('master key evicted from keyring')
