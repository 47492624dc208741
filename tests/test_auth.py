import pytest
from src.lib.auth import hash_password, verify_password
from src.lib.errors import AuthenticationFailure, MalformedHash, PasswordMismatch, PolicyViolation

def test_hash_is_self_describing_argon2id():
	h = hash_password('abcd1234')
	assert h.startswith('$argon2id$')
	assert 'abcd1234' not in h

def test_hash_salt_differs_per_call():
	assert hash_password('abcd1234') != hash_password('abcd1234')

def test_verify_roundtrip():
	verify_password('abcd1234', hash_password('abcd1234'))

def test_verify_wrong_password():
	h = hash_password('abcd1234')
	with pytest.raises(PasswordMismatch):
		verify_password('wrong1234', h)

@pytest.mark.parametrize('stored', ['', 'plain-text', '$2b$12$abcdefghijklmnopqrstuu', '$argon2id$v=19$garbage'])
def test_verify_malformed_hash(stored):
	with pytest.raises(MalformedHash):
		verify_password('abcd1234', stored)

def test_failures_share_authentication_base():
	assert issubclass(PasswordMismatch, AuthenticationFailure)
	assert issubclass(MalformedHash, AuthenticationFailure)
	assert not issubclass(PasswordMismatch, MalformedHash)

def test_empty_password_rejected():
	with pytest.raises(PolicyViolation):
		hash_password('')
