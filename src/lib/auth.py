"""Authentication helpers (hash & verify passwords)."""
from __future__ import annotations
from argon2 import PasswordHasher
from argon2.exceptions import VerifyMismatchError, InvalidHashError, VerificationError
from config.settings import (
	ARGON2_TIME_COST, ARGON2_MEMORY_COST, ARGON2_PARALLELISM, ARGON2_HASH_LENGTH, SALT_LENGTH
)
from .errors import PolicyViolation, PasswordMismatch, MalformedHash

_hasher = PasswordHasher(
	time_cost=ARGON2_TIME_COST,
	memory_cost=ARGON2_MEMORY_COST,
	parallelism=ARGON2_PARALLELISM,
	hash_len=ARGON2_HASH_LENGTH,
	salt_len=SALT_LENGTH,
)

def hash_password(password: str) -> str:
	"""Return a self-describing Argon2id PHC string with an embedded random salt."""
	if not password:
		raise PolicyViolation('Empty password')
	return _hasher.hash(password)

def verify_password(password: str, hashed: str) -> None:
	"""Raise PasswordMismatch for a wrong password, MalformedHash when the
	stored hash cannot be parsed. Parameters are read from the hash itself."""
	try:
		_hasher.verify(hashed, password)
	except VerifyMismatchError as e:
		raise PasswordMismatch('Password does not match') from e
	except InvalidHashError as e:
		raise MalformedHash(f'Stored password hash is malformed: {e}') from e
	except VerificationError as e:
		raise MalformedHash(f'Stored password hash cannot be verified: {e}') from e
