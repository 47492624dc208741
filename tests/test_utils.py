import pytest
from config import settings
from src.lib.errors import InvalidDate
from src.lib.utils import AppPaths, count_non_whitespace, parse_date

@pytest.mark.parametrize('date,expected', [
	('2025-06-01', (2025, 6, 1)),
	('2022-01-01', (2022, 1, 1)),
	('2099-12-31', (2099, 12, 31)),
	('2025-02-30', (2025, 2, 30)),  # ranges only, no calendar check
	('2025-04-31', (2025, 4, 31)),
])
def test_parse_date_valid(date, expected):
	assert parse_date(date) == expected

@pytest.mark.parametrize('date', [
	'2025-13-40', '2021-12-31', '2025-00-01', '2025-01-00', '2025-1-011',
	'2025-06-01 ', '２０２５-06-01', 'abcd-ef-gh', None,
])
def test_parse_date_invalid(date):
	with pytest.raises(InvalidDate):
		parse_date(date)

@pytest.mark.parametrize('text,count', [
	('hello world', 10), ('', 0), ('  \n\t ', 0), ('日记 一 则', 4), ('a　b', 2),
])
def test_count_non_whitespace(text, count):
	assert count_non_whitespace(text) == count

def test_app_paths_layout(tmp_path):
	p = AppPaths(tmp_path)
	assert p.db_path == tmp_path / 'database' / 'trace.db'
	assert p.diary_path('2025-06-01') == tmp_path / 'diaries' / '2025-06-01.md'
	assert AppPaths.relative_filename('2025-06-01') == 'diaries/2025-06-01.md'

def test_app_paths_from_env(monkeypatch, tmp_path):
	monkeypatch.setenv(settings.DATA_DIR_ENV, str(tmp_path))
	assert AppPaths.from_env().data_dir == tmp_path
	monkeypatch.delenv(settings.DATA_DIR_ENV)
	assert AppPaths.from_env().data_dir == settings.DEFAULT_DATA_DIR
