"""CLI commands implemented with click.

Thin wrappers over the auth manager and diary service; every command opens
its own store connection and reads the master key from the OS keyring.
"""
from __future__ import annotations
import logging, click
from pathlib import Path
from config.settings import DATA_DIR_ENV, LOG_LEVEL, LOG_FORMAT, data_dir
from src.lib.errors import DiaryError
from src.lib.keystore import KeyringSecretCache
from src.lib.session import AuthManager
from src.lib.store import MetadataStore
from src.lib.utils import AppPaths, DiaryService

def _fail(e: Exception):
	click.echo(f'Error: {e}', err=True)
	raise SystemExit(1)

@click.group()
@click.option('--data-dir', 'data_path', type=click.Path(file_okay=False, path_type=Path), envvar=DATA_DIR_ENV,
	default=None, help='Directory holding the database and encrypted diaries.')
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging.')
@click.pass_context
def cli(ctx, data_path, verbose):
	"""TraceDiary encrypted journal"""
	logging.basicConfig(level=logging.DEBUG if verbose else LOG_LEVEL, format=LOG_FORMAT)
	paths = AppPaths(data_path or data_dir())
	store = MetadataStore(paths.db_path)
	cache = KeyringSecretCache()
	ctx.obj = {
		'auth': AuthManager(store, cache),
		'diary': DiaryService(paths, store, cache),
	}

@cli.command()
@click.pass_obj
def status(obj):
	"""Show whether a password is set and whether it needs re-verification."""
	try:
		st = obj['auth'].status()
	except DiaryError as e:
		_fail(e)
	click.echo(f'password_set: {str(st.password_set).lower()}')
	click.echo(f'needs_verify: {str(st.needs_verify).lower()}')

@cli.command('set-password')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True)
@click.pass_obj
def set_password(obj, password):
	"""Set the diary password (first run only) and unlock."""
	try:
		obj['auth'].set_password(password)
	except DiaryError as e:
		_fail(e)
	click.echo('Password set. Diary unlocked.')

@cli.command()
@click.option('--password', prompt=True, hide_input=True)
@click.pass_obj
def verify(obj, password):
	"""Verify the password and unlock the diary."""
	try:
		obj['auth'].verify_password(password)
	except DiaryError as e:
		_fail(e)
	click.echo('Password verified. Diary unlocked.')

@cli.command()
@click.pass_obj
def lock(obj):
	"""Forget the cached master key."""
	try:
		obj['auth'].lock()
	except DiaryError as e:
		_fail(e)
	click.echo('Diary locked.')

@cli.command()
@click.argument('date')
@click.option('--content', default=None, help='Entry text; read from stdin when omitted.')
@click.pass_obj
def write(obj, date, content):
	"""Encrypt and save the entry for DATE (YYYY-MM-DD)."""
	if content is None:
		with click.open_file('-') as f:
			content = f.read()
	try:
		entry = obj['diary'].save_entry(date, content)
	except DiaryError as e:
		_fail(e)
	click.echo(f'Saved {entry.date} ({entry.word_count} chars).')

@cli.command()
@click.argument('date')
@click.pass_obj
def read(obj, date):
	"""Decrypt and print the entry for DATE (YYYY-MM-DD)."""
	try:
		entry = obj['diary'].get_entry(date)
	except DiaryError as e:
		_fail(e)
	if entry is None:
		click.echo('Not found')
		return
	click.echo(f"Date: {entry.date}\nWords: {entry.word_count}\nModified: {entry.modified_at or '-'}\n---\n{entry.content}")

@cli.command()
@click.pass_obj
def reconcile(obj):
	"""Rebuild missing metadata rows from the encrypted files."""
	try:
		result = obj['diary'].reconcile()
	except DiaryError as e:
		_fail(e)
	if not (result.repaired or result.failed):
		click.echo('Nothing to repair.')
	for date in result.repaired:
		click.echo(f'Repaired {date}')
	for date, reason in result.failed:
		click.echo(f'Failed {date}: {reason}', err=True)
	if result.failed:
		raise SystemExit(1)
