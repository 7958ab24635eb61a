import pytest

from hiworks_commute.core.config import Settings
from hiworks_commute.services.browser_session import BrowserSession
from hiworks_commute.services.credential_store import CredentialStore
from tests.fakes import COMPANY_URL, FakeDialog, FakeDriver, FakeHiworksSite, FakePage


@pytest.fixture
def settings(tmp_path):
    return Settings(config_dir=tmp_path / "hiworks")


@pytest.fixture
def store(settings):
    return CredentialStore(settings.config_file)


@pytest.fixture
def configured_store(store):
    store.set("company_url", COMPANY_URL)
    store.set("username", "alex@acme.co.kr")
    store.set("password", "correct-horse")
    return store


@pytest.fixture
def page():
    return FakePage()


@pytest.fixture
def driver(page):
    return FakeDriver(page)


@pytest.fixture
def session(settings, driver):
    return BrowserSession(settings, driver_factory=driver)


@pytest.fixture
def make_site(page):
    def _make(**kwargs):
        return FakeHiworksSite(page, **kwargs)

    return _make


@pytest.fixture
def empty_driver():
    return FakeDriver(page=None)


@pytest.fixture
def make_dialog():
    return FakeDialog
