"""Cryptographic utilities (password policy, master key KDF, encryption envelope)."""
from __future__ import annotations
import base64, binascii, json, secrets
from typing import Tuple
from argon2.exceptions import HashingError
from argon2.low_level import hash_secret_raw, Type
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.backends import default_backend
from config.settings import (
	MIN_PASSWORD_LENGTH, ARGON2_TIME_COST, ARGON2_MEMORY_COST, ARGON2_PARALLELISM,
	SALT_LENGTH, KEY_LENGTH, NONCE_LENGTH, AUTH_TAG_LENGTH, ENVELOPE_VERSION
)
from .errors import (
	PolicyViolation, CorruptionError, UnsupportedEnvelopeVersion, DecryptionFailed,
	EncodingError, InvalidKeyError, KeyDerivationError
)

def validate_password(password: str) -> None:
	"""Raise PolicyViolation unless the password is at least 8 characters
	and mixes letters with digits."""
	if len(password) < MIN_PASSWORD_LENGTH:
		raise PolicyViolation(f'Password must be at least {MIN_PASSWORD_LENGTH} characters')
	has_letter = any(c.isalpha() for c in password)
	has_number = any(c.isnumeric() for c in password)
	if not (has_letter and has_number):
		raise PolicyViolation('Password must contain both letters and digits')

def _b64decode(value, what: str) -> bytes:
	if not isinstance(value, str):
		raise CorruptionError(f'{what} is not a string')
	try:
		return base64.b64decode(value, validate=True)
	except (binascii.Error, ValueError) as e:
		raise CorruptionError(f'Cannot decode {what}: {e}') from e

def _b64encode(raw: bytes) -> str:
	return base64.b64encode(raw).decode('ascii')

def _check_key(key: bytes) -> None:
	if len(key) != KEY_LENGTH:
		raise InvalidKeyError(f'Master key must be {KEY_LENGTH} bytes')

class DiaryCrypto:
	"""Master key derivation and the versioned AES-256-GCM envelope.

	Keys are derived with Argon2id (same parameters as the credential hash)
	and the envelope is the JSON text stored as the diary file content:

		{"v":1,"nonce_b64":"...","ciphertext_b64":"..."}

	where the ciphertext carries the 16-byte GCM tag at its end.
	"""

	def __init__(self):
		self._backend = default_backend()

	def generate_salt(self) -> bytes:
		return secrets.token_bytes(SALT_LENGTH)

	def derive_new_key(self, password: str) -> Tuple[str, bytes]:
		"""Return (salt_b64, key) for a freshly generated salt."""
		salt_b64 = _b64encode(self.generate_salt())
		return salt_b64, self.derive_key_from_salt(password, salt_b64)

	def derive_key_from_salt(self, password: str, salt_b64: str) -> bytes:
		salt = _b64decode(salt_b64, 'kdf_salt')
		if len(salt) != SALT_LENGTH:
			raise CorruptionError(f'kdf_salt must decode to {SALT_LENGTH} bytes, got {len(salt)}')
		try:
			return hash_secret_raw(
				secret=password.encode('utf-8'),
				salt=salt,
				time_cost=ARGON2_TIME_COST,
				memory_cost=ARGON2_MEMORY_COST,
				parallelism=ARGON2_PARALLELISM,
				hash_len=KEY_LENGTH,
				type=Type.ID,
			)
		except HashingError as e:
			raise KeyDerivationError(f'Argon2 key derivation failed: {e}') from e

	def encrypt(self, data: bytes, key: bytes) -> Tuple[bytes, bytes]:
		"""Return (nonce, ciphertext + tag). A new random nonce on every call."""
		_check_key(key)
		nonce = secrets.token_bytes(NONCE_LENGTH)
		enc = Cipher(algorithms.AES(key), modes.GCM(nonce), backend=self._backend).encryptor()
		ct = enc.update(data) + enc.finalize()
		return nonce, ct + enc.tag

	def decrypt(self, nonce: bytes, blob: bytes, key: bytes) -> bytes:
		_check_key(key)
		if len(nonce) != NONCE_LENGTH:
			raise CorruptionError(f'Nonce must be {NONCE_LENGTH} bytes, got {len(nonce)}')
		if len(blob) < AUTH_TAG_LENGTH:
			raise DecryptionFailed()
		ct, tag = blob[:-AUTH_TAG_LENGTH], blob[-AUTH_TAG_LENGTH:]
		dec = Cipher(algorithms.AES(key), modes.GCM(nonce, tag), backend=self._backend).decryptor()
		try:
			return dec.update(ct) + dec.finalize()
		except InvalidTag:
			raise DecryptionFailed() from None

	def encrypt_text(self, key: bytes, plaintext: str) -> str:
		nonce, ct = self.encrypt(plaintext.encode('utf-8'), key)
		payload = {'v': ENVELOPE_VERSION, 'nonce_b64': _b64encode(nonce), 'ciphertext_b64': _b64encode(ct)}
		return json.dumps(payload, separators=(',', ':'))

	def decrypt_text(self, key: bytes, envelope: str) -> str:
		_check_key(key)
		try:
			payload = json.loads(envelope)
		except ValueError as e:
			raise CorruptionError(f'Cannot parse envelope: {e}') from e
		if not isinstance(payload, dict):
			raise CorruptionError('Envelope is not a JSON object')
		version = payload.get('v')
		if not isinstance(version, int) or isinstance(version, bool):
			raise CorruptionError('Envelope version missing or not an integer')
		if version != ENVELOPE_VERSION:
			raise UnsupportedEnvelopeVersion(f'Unsupported envelope version: {version}')
		nonce = _b64decode(payload.get('nonce_b64'), 'nonce_b64')
		ct = _b64decode(payload.get('ciphertext_b64'), 'ciphertext_b64')
		raw = self.decrypt(nonce, ct, key)
		try:
			return raw.decode('utf-8')
		except UnicodeDecodeError as e:
			raise EncodingError('Decrypted content is not valid UTF-8') from e
