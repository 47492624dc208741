"""SQLite metadata store: settings key/value table and per-date diary rows.

A connection is opened per operation and closed afterwards; concurrency is
left to SQLite's own file locking.
"""
from __future__ import annotations
import logging, sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Iterator, Mapping, Optional
from config.settings import ENTRY_TYPE_DAILY
from .errors import StorageError

log = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS settings (
	key   TEXT PRIMARY KEY,
	value TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS diaries (
	date        TEXT PRIMARY KEY,
	year        INTEGER NOT NULL,
	month       INTEGER NOT NULL,
	day         INTEGER NOT NULL,
	entry_type  TEXT NOT NULL DEFAULT 'daily',
	filename    TEXT NOT NULL,
	word_count  INTEGER NOT NULL DEFAULT 0,
	created_at  TEXT NOT NULL,
	modified_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_diaries_ymd ON diaries (year, month, day);
"""

@dataclass
class DiaryMeta:
	date: str
	year: int
	month: int
	day: int
	entry_type: str
	filename: str
	word_count: int
	created_at: str
	modified_at: str

class MetadataStore:
	def __init__(self, db_path: Path):
		self.db_path = Path(db_path)

	@contextmanager
	def connect(self) -> Iterator[sqlite3.Connection]:
		"""Open a connection, run the body in one transaction, close."""
		try:
			self.db_path.parent.mkdir(parents=True, exist_ok=True)
			conn = sqlite3.connect(self.db_path)
		except (OSError, sqlite3.Error) as e:
			raise StorageError(f'Cannot open database {self.db_path}: {e}') from e
		try:
			with conn:
				conn.executescript(SCHEMA)
				yield conn
		except sqlite3.Error as e:
			raise StorageError(f'Database error: {e}') from e
		finally:
			conn.close()

	# settings
	def get_setting(self, key: str) -> Optional[str]:
		return self.get_settings([key]).get(key)

	def get_settings(self, keys: Iterable[str]) -> Dict[str, str]:
		keys = list(keys)
		with self.connect() as conn:
			rows = conn.execute(
				f"SELECT key, value FROM settings WHERE key IN ({','.join('?' * len(keys))})", keys
			).fetchall()
		return dict(rows)

	def set_settings(self, values: Mapping[str, str]) -> None:
		"""Write all values in a single transaction."""
		with self.connect() as conn:
			conn.executemany(
				"INSERT INTO settings (key, value) VALUES (?, ?) "
				"ON CONFLICT(key) DO UPDATE SET value = excluded.value",
				list(values.items()),
			)

	def set_setting(self, key: str, value: str) -> None:
		self.set_settings({key: value})

	# diaries
	def find_by_date(self, date: str) -> Optional[DiaryMeta]:
		with self.connect() as conn:
			row = conn.execute(
				"SELECT date, year, month, day, entry_type, filename, word_count, created_at, modified_at "
				"FROM diaries WHERE date = ?", (date,)
			).fetchone()
		return DiaryMeta(*row) if row else None

	def upsert_daily(self, date: str, year: int, month: int, day: int, filename: str,
			word_count: int, now_ts: str, created_at: Optional[str] = None) -> None:
		"""Insert or replace the row for `date`; created_at is kept on update."""
		with self.connect() as conn:
			conn.execute(
				"INSERT INTO diaries "
				"(date, year, month, day, entry_type, filename, word_count, created_at, modified_at) "
				"VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?) "
				"ON CONFLICT(date) DO UPDATE SET "
				"year = excluded.year, month = excluded.month, day = excluded.day, "
				"entry_type = excluded.entry_type, filename = excluded.filename, "
				"word_count = excluded.word_count, modified_at = excluded.modified_at",
				(date, year, month, day, ENTRY_TYPE_DAILY, filename, word_count, created_at or now_ts, now_ts),
			)
		log.debug('diary metadata upserted date=%s words=%d', date, word_count)
