from urllib.parse import urlparse

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from hiworks_commute.core.config import Settings
from hiworks_commute.core.enums import AuthState
from hiworks_commute.core.errors import AuthenticationError, ElementNotFoundError
from hiworks_commute.core.logging import get_logger
from hiworks_commute.services.browser_session import BrowserSession
from hiworks_commute.services.credential_store import CredentialStore


logger = get_logger(__name__)

SECRET_INPUT = 'input[type="password"]'
IDENTITY_INPUT = 'input[placeholder="Username"]'
SUBMIT_BUTTON = 'button[type="submit"]'


def is_login_url(url: str, settings: Settings) -> bool:
    return settings.login_marker in (url or "")


def is_authenticated_url(url: str, settings: Settings) -> bool:
    host = (urlparse(url or "").hostname or "").lower()
    domain = settings.authenticated_domain.lower()
    on_domain = host == domain or host.endswith("." + domain)
    return on_domain and not is_login_url(url, settings)


class LoginFlow:
    """Drives the two-step Hiworks login form.

    The site sometimes remembers the username and shows the password field
    straight away; in that case the username step is skipped entirely.
    """

    def __init__(self, session: BrowserSession, store: CredentialStore, settings: Settings) -> None:
        self.session = session
        self.store = store
        self.settings = settings
        self.state = AuthState.UNKNOWN

    def classify(self) -> AuthState:
        url = self.session.current_url()
        if is_login_url(url, self.settings):
            return AuthState.ON_LOGIN_PAGE
        if is_authenticated_url(url, self.settings):
            return AuthState.AUTHENTICATED
        return AuthState.UNKNOWN

    def run(self) -> AuthState:
        self.state = AuthState.UNKNOWN
        password = self.store.require("password")

        page = self.session.ensure()
        if not is_login_url(self.session.current_url(), self.settings):
            self.session.goto(self.store.require("company_url"))
        self._transition(AuthState.ON_LOGIN_PAGE)
        self.session.wait(self.settings.pre_login_wait_ms)

        secret_input = page.locator(SECRET_INPUT)
        if self._is_visible(secret_input):
            self._transition(AuthState.AWAITING_SECRET)
        else:
            self._transition(AuthState.AWAITING_IDENTITY)
            self._submit_identity(page, secret_input)
            self._transition(AuthState.AWAITING_SECRET)

        secret_input.fill(password)
        self.session.wait(self.settings.secret_fill_pause_ms)
        page.locator(SUBMIT_BUTTON).click()
        self.session.wait_for_network_idle()
        self.session.wait(self.settings.login_settle_ms)

        if is_login_url(self.session.current_url(), self.settings):
            self._transition(AuthState.LOGIN_FAILED)
            raise AuthenticationError("로그인 실패. 아이디와 비밀번호를 확인해주세요.")

        self._transition(AuthState.AUTHENTICATED)
        return self.state

    def _submit_identity(self, page, secret_input) -> None:
        username = self.store.require("username")

        identity_input = page.locator(IDENTITY_INPUT)
        try:
            identity_input.wait_for(state="visible", timeout=self.settings.element_timeout_ms)
        except PlaywrightTimeoutError as exc:
            raise ElementNotFoundError("이메일 입력 필드를 찾을 수 없습니다") from exc

        identity_input.fill(username)
        page.locator(SUBMIT_BUTTON).click()
        self.session.wait_for_network_idle()

        try:
            secret_input.wait_for(state="visible", timeout=self.settings.element_timeout_ms)
        except PlaywrightTimeoutError as exc:
            raise ElementNotFoundError("비밀번호 입력 필드를 찾을 수 없습니다") from exc

    @staticmethod
    def _is_visible(locator) -> bool:
        try:
            return locator.is_visible()
        except PlaywrightError:
            return False

    def _transition(self, state: AuthState) -> None:
        logger.info(
            "Login state changed",
            extra={"extra": {"from": self.state.value, "to": state.value, "url": self.session.current_url()}},
        )
        self.state = state
