"""Utility layer: diary entry persistence.

Each diary date maps to one encrypted text file `diaries/<date>.md` under the
data directory plus one metadata row in SQLite. Every read or write needs the
master key from the secret cache; without it the operation fails with Locked.

The blob is replaced atomically (temp file + rename) and the metadata row is
committed afterwards in its own transaction. A crash between the two leaves a
blob without a matching row; `DiaryService.reconcile()` repairs that from the
blob itself.
"""
from __future__ import annotations
import contextlib, logging, os, re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Tuple
from config import settings
from config.settings import MIN_YEAR, DIARY_SUFFIX, TMP_SUFFIX, DIARIES_DIRNAME, DB_RELATIVE_PATH
from .crypto import DiaryCrypto
from .errors import CorruptionError, DiaryError, InvalidDate, Locked, StorageError
from .keystore import SecretCache
from .session import now_unix_seconds
from .store import MetadataStore

log = logging.getLogger(__name__)

_DATE_RE = re.compile(r'(\d{4})-(\d{2})-(\d{2})', re.ASCII)

def parse_date(date: str) -> Tuple[int, int, int]:
	"""Validate a YYYY-MM-DD string and return (year, month, day).

	Only ranges are checked (year >= 2022, month 1-12, day 1-31), so
	2025-02-30 is accepted here.
	"""
	m = _DATE_RE.fullmatch(date) if isinstance(date, str) else None
	if not m:
		raise InvalidDate(f'Invalid date {date!r}, expected YYYY-MM-DD')
	year, month, day = (int(g) for g in m.groups())
	if year < MIN_YEAR:
		raise InvalidDate(f"Invalid date {date!r}: only dates from {MIN_YEAR} onwards are supported")
	if not 1 <= month <= 12:
		raise InvalidDate(f"Invalid date {date!r}: month must be between 1 and 12")
	if not 1 <= day <= 31:
		raise InvalidDate(f"Invalid date {date!r}: day must be between 1 and 31")
	return year, month, day

def count_non_whitespace(content: str) -> int:
	return sum(1 for c in content if not c.isspace())

@dataclass(frozen=True)
class AppPaths:
	data_dir: Path

	@classmethod
	def from_env(cls) -> 'AppPaths':
		return cls(settings.data_dir())

	@property
	def db_path(self) -> Path:
		return self.data_dir / DB_RELATIVE_PATH

	@property
	def diaries_dir(self) -> Path:
		return self.data_dir / DIARIES_DIRNAME

	def diary_path(self, date: str) -> Path:
		return self.diaries_dir / f'{date}{DIARY_SUFFIX}'

	@staticmethod
	def relative_filename(date: str) -> str:
		return f'{DIARIES_DIRNAME}/{date}{DIARY_SUFFIX}'

@dataclass
class DiaryEntry:
	date: str
	content: str
	word_count: int
	modified_at: str

@dataclass
class ReconcileResult:
	repaired: List[str] = field(default_factory=list)
	failed: List[Tuple[str, str]] = field(default_factory=list)

class DiaryService:
	def __init__(self, paths: AppPaths, store: MetadataStore, cache: SecretCache,
			crypto: Optional[DiaryCrypto] = None, clock: Callable[[], int] = now_unix_seconds):
		self.paths = paths
		self.store = store
		self.cache = cache
		self.crypto = crypto or DiaryCrypto()
		self.clock = clock

	def _require_key(self) -> bytes:
		key = self.cache.load()
		if key is None:
			raise Locked('Diary is locked: verify your password first')
		return key

	def get_entry(self, date: str) -> Optional[DiaryEntry]:
		parse_date(date)
		key = self._require_key()
		path = self.paths.diary_path(date)
		if not path.exists():
			return None
		content = self.crypto.decrypt_text(key, self._read_blob(path))
		meta = self.store.find_by_date(date)
		if meta is None:
			# written before metadata existed
			log.debug('no metadata for %s, counting from content', date)
			return DiaryEntry(date, content, count_non_whitespace(content), '')
		return DiaryEntry(date, content, meta.word_count, meta.modified_at)

	def save_entry(self, date: str, content: str) -> DiaryEntry:
		year, month, day = parse_date(date)
		key = self._require_key()
		word_count = count_non_whitespace(content)
		envelope = self.crypto.encrypt_text(key, content)
		self._write_blob(self.paths.diary_path(date), envelope)
		now_ts = str(self.clock())
		self.store.upsert_daily(date, year, month, day, self.paths.relative_filename(date), word_count, now_ts)
		log.info('diary saved date=%s words=%d', date, word_count)
		return DiaryEntry(date, content, word_count, now_ts)

	def reconcile(self) -> ReconcileResult:
		"""Drop leftover temp blobs and rebuild missing metadata rows.

		A blob that cannot be read or decrypted is logged, recorded in
		`failed` with the error message, and the pass moves on.
		"""
		key = self._require_key()
		result = ReconcileResult()
		diaries_dir = self.paths.diaries_dir
		if not diaries_dir.is_dir():
			return result
		for tmp in sorted(diaries_dir.glob(f'*{DIARY_SUFFIX}{TMP_SUFFIX}')):
			log.warning('removing interrupted write %s', tmp.name)
			try:
				tmp.unlink()
			except OSError as e:
				raise StorageError(f'Cannot remove {tmp.name}: {e}') from e
		for path in sorted(diaries_dir.glob(f'*{DIARY_SUFFIX}')):
			date = path.name[:-len(DIARY_SUFFIX)]
			try:
				year, month, day = parse_date(date)
			except InvalidDate:
				log.warning('skipping unexpected file %s', path.name)
				continue
			if self.store.find_by_date(date) is not None:
				continue
			try:
				content = self.crypto.decrypt_text(key, self._read_blob(path))
			except DiaryError as e:
				log.error('cannot rebuild metadata for %s: %s', date, type(e).__name__)
				result.failed.append((date, str(e)))
				continue
			ts = str(int(path.stat().st_mtime))
			self.store.upsert_daily(date, year, month, day, self.paths.relative_filename(date),
				count_non_whitespace(content), ts, created_at=ts)
			log.info('metadata rebuilt for %s', date)
			result.repaired.append(date)
		return result

	def _read_blob(self, path: Path) -> str:
		try:
			return path.read_text(encoding='utf-8')
		except UnicodeDecodeError as e:
			raise CorruptionError(f'{path.name} is not a text envelope') from e
		except OSError as e:
			raise StorageError(f'Cannot read {path.name}: {e}') from e

	def _write_blob(self, path: Path, text: str) -> None:
		tmp = path.with_name(path.name + TMP_SUFFIX)
		try:
			path.parent.mkdir(parents=True, exist_ok=True)
			with open(tmp, 'w', encoding='utf-8', newline='') as f:
				f.write(text)
				f.flush()
				os.fsync(f.fileno())
			os.replace(tmp, path)
		except OSError as e:
			with contextlib.suppress(OSError):
				tmp.unlink()
			raise StorageError(f'Cannot write {path.name}: {e}') from e
