import keyring
import pytest
from keyring.backend import KeyringBackend
from keyring.errors import KeyringError, PasswordDeleteError

from src.lib.keystore import KeyringSecretCache
from src.lib.session import AuthManager
from src.lib.store import MetadataStore
from src.lib.utils import AppPaths, DiaryService


class MemoryKeyring(KeyringBackend):
    priority = 1

    def __init__(self):
        super().__init__()
        self.items = {}

    def get_password(self, service, username):
        return self.items.get((service, username))

    def set_password(self, service, username, password):
        self.items[(service, username)] = password

    def delete_password(self, service, username):
        try:
            del self.items[(service, username)]
        except KeyError:
            raise PasswordDeleteError('not found')


class BrokenKeyring(KeyringBackend):
    priority = 1

    def get_password(self, service, username):
        raise KeyringError('secret service unavailable')

    def set_password(self, service, username, password):
        raise KeyringError('secret service unavailable')

    def delete_password(self, service, username):
        raise KeyringError('secret service unavailable')


class Clock:
    def __init__(self, now=1_750_000_000):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture(autouse=True)
def memory_keyring():
    previous = keyring.get_keyring()
    backend = MemoryKeyring()
    keyring.set_keyring(backend)
    yield backend
    keyring.set_keyring(previous)


@pytest.fixture
def broken_keyring():
    previous = keyring.get_keyring()
    keyring.set_keyring(BrokenKeyring())
    yield
    keyring.set_keyring(previous)


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def paths(tmp_path):
    return AppPaths(tmp_path / 'data')


@pytest.fixture
def store(paths):
    return MetadataStore(paths.db_path)


@pytest.fixture
def cache():
    return KeyringSecretCache()


@pytest.fixture
def auth_manager(store, cache, clock):
    return AuthManager(store, cache, clock=clock)


@pytest.fixture
def diary(paths, store, cache, clock):
    return DiaryService(paths, store, cache, clock=clock)
