"""Authentication state: is a password set, and is re-verification due.

States are computed on every query from the settings table:

	NoPassword                   -- no password_hash stored
	PasswordSet, verified        -- now - last_verified_at <= 7 days
	PasswordSet, stale           -- older, or last_verified_at unreadable

A successful set/verify leaves the derived master key in the secret cache;
a failed verify never touches it.
"""
from __future__ import annotations
import logging, time
from dataclasses import dataclass
from typing import Callable, Optional
from config.settings import VERIFY_INTERVAL_SECONDS
from . import auth
from .crypto import DiaryCrypto, validate_password
from .errors import AuthenticationFailure, CorruptionError, NoPasswordSet, PasswordAlreadySet
from .keystore import SecretCache
from .store import MetadataStore

log = logging.getLogger(__name__)

PASSWORD_HASH = 'password_hash'
KDF_SALT = 'kdf_salt'
PASSWORD_SET_AT = 'password_set_at'
LAST_VERIFIED_AT = 'last_verified_at'

def now_unix_seconds() -> int:
	return int(time.time())

def parse_unix_seconds(value: Optional[str]) -> Optional[int]:
	"""Plain ASCII decimal digits only; signs, underscores and other digit forms are rejected."""
	if not isinstance(value, str):
		return None
	value = value.strip()
	if not (value.isascii() and value.isdigit()):
		return None
	return int(value)

@dataclass(frozen=True)
class AuthStatus:
	password_set: bool
	needs_verify: bool

class AuthManager:
	def __init__(self, store: MetadataStore, cache: SecretCache,
			crypto: Optional[DiaryCrypto] = None, clock: Callable[[], int] = now_unix_seconds):
		self.store = store
		self.cache = cache
		self.crypto = crypto or DiaryCrypto()
		self.clock = clock

	def status(self) -> AuthStatus:
		values = self.store.get_settings([PASSWORD_HASH, LAST_VERIFIED_AT])
		password_set = bool(values.get(PASSWORD_HASH))
		if not password_set:
			return AuthStatus(False, False)
		last = parse_unix_seconds(values.get(LAST_VERIFIED_AT))
		if last is None:
			return AuthStatus(True, True)
		return AuthStatus(True, max(0, self.clock() - last) > VERIFY_INTERVAL_SECONDS)

	def set_password(self, password: str) -> None:
		validate_password(password)
		if self.store.get_setting(PASSWORD_HASH):
			raise PasswordAlreadySet('A password is already set')
		password_hash = auth.hash_password(password)
		salt_b64, master_key = self.crypto.derive_new_key(password)
		now = str(self.clock())
		# hash and salt only ever land together
		self.store.set_settings({
			PASSWORD_HASH: password_hash,
			KDF_SALT: salt_b64,
			PASSWORD_SET_AT: now,
			LAST_VERIFIED_AT: now,
		})
		self.cache.store(master_key)
		log.info('password set, master key cached')

	def verify_password(self, password: str) -> None:
		values = self.store.get_settings([PASSWORD_HASH, KDF_SALT])
		password_hash = values.get(PASSWORD_HASH)
		salt_b64 = values.get(KDF_SALT)
		if not password_hash:
			if salt_b64:
				raise CorruptionError('kdf_salt is stored without a password hash')
			raise NoPasswordSet('No password has been set')
		try:
			auth.verify_password(password, password_hash)
		except AuthenticationFailure as e:
			log.warning('password verification failed: %s', type(e).__name__)
			raise
		if not salt_b64:
			raise CorruptionError('kdf_salt is missing for the stored password hash')
		master_key = self.crypto.derive_key_from_salt(password, salt_b64)
		self.cache.store(master_key)
		self.store.set_setting(LAST_VERIFIED_AT, str(self.clock()))
		log.info('password verified, master key cached')

	def lock(self) -> None:
		self.cache.clear()
