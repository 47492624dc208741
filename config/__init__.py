"""Configuration settings and constants for TraceDiary.

The constants live in `config.settings`; this package re-exports them so
application code can use either `from config import KEY_LENGTH` or
`from config.settings import KEY_LENGTH`.
"""

from config.settings import (
	MIN_PASSWORD_LENGTH,
	ARGON2_TIME_COST, ARGON2_MEMORY_COST, ARGON2_PARALLELISM, ARGON2_HASH_LENGTH,
	SALT_LENGTH, KEY_LENGTH, NONCE_LENGTH, AUTH_TAG_LENGTH, ENVELOPE_VERSION,
	KEYRING_SERVICE, KEYRING_USERNAME, VERIFY_INTERVAL_SECONDS,
	MIN_YEAR, ENTRY_TYPE_DAILY, DIARY_SUFFIX, TMP_SUFFIX,
	DATA_DIR_ENV, DEFAULT_DATA_DIR, DB_RELATIVE_PATH, DIARIES_DIRNAME,
	LOG_LEVEL, LOG_FORMAT, data_dir,
)
from config.settings import __all__  # noqa: F401
