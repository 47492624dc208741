"""Project configuration settings.

Constants shared by the crypto, keystore and diary layers. The data
directory is resolved from the environment at call time so tests can
redirect it.
"""

from pathlib import Path
import os

# Password policy
MIN_PASSWORD_LENGTH = 8

# Argon2id parameters (credential hash and master key KDF)
ARGON2_TIME_COST = 2
ARGON2_MEMORY_COST = 19456  # KiB
ARGON2_PARALLELISM = 1
ARGON2_HASH_LENGTH = 32

# Security / crypto
SALT_LENGTH = 16
KEY_LENGTH = 32       # AES-256
NONCE_LENGTH = 12     # GCM nonce
AUTH_TAG_LENGTH = 16  # GCM tag length
ENVELOPE_VERSION = 1

# OS secret store entry
KEYRING_SERVICE = "TraceDiary"
KEYRING_USERNAME = "default"

# Authentication
VERIFY_INTERVAL_SECONDS = 7 * 24 * 60 * 60

# Diary
MIN_YEAR = 2022
ENTRY_TYPE_DAILY = "daily"
DIARY_SUFFIX = ".md"
TMP_SUFFIX = ".tmp"

# Storage layout
DATA_DIR_ENV = "DIARY_HOME"
DEFAULT_DATA_DIR = Path("diary_data")
DB_RELATIVE_PATH = Path("database") / "trace.db"
DIARIES_DIRNAME = "diaries"

# Logging
LOG_LEVEL = "INFO"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def data_dir() -> Path:
	env_path = os.environ.get(DATA_DIR_ENV)
	return Path(env_path) if env_path else DEFAULT_DATA_DIR


__all__ = [
	'MIN_PASSWORD_LENGTH',
	'ARGON2_TIME_COST','ARGON2_MEMORY_COST','ARGON2_PARALLELISM','ARGON2_HASH_LENGTH',
	'SALT_LENGTH','KEY_LENGTH','NONCE_LENGTH','AUTH_TAG_LENGTH','ENVELOPE_VERSION',
	'KEYRING_SERVICE','KEYRING_USERNAME','VERIFY_INTERVAL_SECONDS',
	'MIN_YEAR','ENTRY_TYPE_DAILY','DIARY_SUFFIX','TMP_SUFFIX',
	'DATA_DIR_ENV','DEFAULT_DATA_DIR','DB_RELATIVE_PATH','DIARIES_DIRNAME',
	'LOG_LEVEL','LOG_FORMAT','data_dir'
]
