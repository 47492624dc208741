"""Error taxonomy shared by the credential, crypto and diary layers.

Every failure the core can surface is a `DiaryError` subclass, so callers
branch on the class instead of matching message text. `Locked` is the
expected, recoverable one (re-prompt for the password); `CorruptionError`
means a stored record cannot be used as-is.
"""
from __future__ import annotations

class DiaryError(Exception):
	pass

class PolicyViolation(DiaryError):
	"""Password does not meet the strength rules. Nothing was changed."""

class InvalidDate(DiaryError):
	"""Date is not YYYY-MM-DD or is out of the accepted range."""

class AuthenticationFailure(DiaryError):
	"""Password could not be verified. Nothing was changed."""

class PasswordMismatch(AuthenticationFailure): ...
class MalformedHash(AuthenticationFailure): ...
class NoPasswordSet(AuthenticationFailure): ...

class PasswordAlreadySet(DiaryError): ...

class Locked(DiaryError):
	"""No master key is cached; verify the password to unlock."""

class CorruptionError(DiaryError):
	"""A stored record (salt, envelope, cached key) is malformed."""

class UnsupportedEnvelopeVersion(CorruptionError): ...

class DecryptionFailed(DiaryError):
	"""Authentication tag mismatch: wrong key or tampered ciphertext."""

	def __init__(self, message: str = 'Decryption failed'):
		super().__init__(message)

class EncodingError(DiaryError): ...
class InvalidKeyError(DiaryError, ValueError): ...
class KeyDerivationError(DiaryError): ...
class StorageError(DiaryError): ...
