from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

from playwright.sync_api import sync_playwright

from hiworks_commute.core.config import Settings
from hiworks_commute.core.errors import PromptNotShownError
from hiworks_commute.core.logging import get_logger


logger = get_logger(__name__)

PROMPT_POLL_MS = 100
MANUAL_LOGIN_WINDOW_POSITION = (100, 100)


class BrowserSession:
    """One persistent Chromium context and its active page.

    The context is rooted at the profile directory from settings, so cookies and
    local storage survive worker restarts. Nothing is launched until the first
    call to ``ensure``.
    """

    def __init__(self, settings: Settings, driver_factory: Callable[[], Any] | None = None) -> None:
        self.settings = settings
        self._driver_factory = driver_factory or sync_playwright
        self._playwright = None
        self._context = None
        self._page = None

    @property
    def is_active(self) -> bool:
        return self._context is not None

    def ensure(self):
        if self._context is not None:
            return self._page

        profile_dir = self.settings.browser_data_dir
        profile_dir.mkdir(parents=True, exist_ok=True)

        playwright = self._driver_factory().start()
        try:
            context = playwright.chromium.launch_persistent_context(
                str(profile_dir),
                headless=self.settings.browser_headless,
                locale=self.settings.browser_locale,
                viewport={
                    "width": self.settings.viewport_width,
                    "height": self.settings.viewport_height,
                },
                args=self.settings.browser_args,
            )
        except Exception:
            playwright.stop()
            raise

        self._playwright = playwright
        self._context = context
        self._page = context.pages[0] if context.pages else context.new_page()
        logger.info(
            "Browser session started",
            extra={"extra": {"profile_dir": str(profile_dir), "headless": self.settings.browser_headless}},
        )
        return self._page

    def goto(self, url: str) -> str:
        page = self.ensure()
        page.goto(url)
        page.wait_for_load_state("networkidle")
        return page.url

    def wait_for_network_idle(self) -> None:
        self.ensure().wait_for_load_state("networkidle")

    def wait(self, timeout_ms: int) -> None:
        self.ensure().wait_for_timeout(timeout_ms)

    def current_url(self) -> str:
        if self._page is None:
            return ""
        return self._page.url or ""

    def bring_to_front(self) -> None:
        self.ensure().bring_to_front()

    def reposition_window(self) -> None:
        x, y = MANUAL_LOGIN_WINDOW_POSITION
        self.ensure().evaluate(f"() => window.moveTo({x}, {y})")

    def surface_for_manual_login(self) -> None:
        self.reposition_window()
        self.bring_to_front()
        logger.info("Browser window surfaced for manual login", extra={"extra": {"url": self.current_url()}})

    @contextmanager
    def expect_prompt(self, timeout_ms: int) -> Iterator[list[str]]:
        """Accept exactly one dialog raised by the wrapped action.

        The handler is registered before the body runs. After the body, waits up
        to ``timeout_ms`` for the dialog and raises ``PromptNotShownError`` if it
        never came.
        """
        page = self.ensure()
        accepted: list[str] = []

        def _accept(dialog) -> None:
            accepted.append(dialog.message)
            dialog.accept()

        page.once("dialog", _accept)
        try:
            yield accepted
            waited = 0
            while not accepted and waited < timeout_ms:
                page.wait_for_timeout(PROMPT_POLL_MS)
                waited += PROMPT_POLL_MS
            if not accepted:
                raise PromptNotShownError("확인 창이 나타나지 않았습니다")
            logger.info("Confirmation prompt accepted", extra={"extra": {"prompt": accepted[0]}})
        finally:
            if not accepted:
                page.remove_listener("dialog", _accept)

    def close(self) -> bool:
        if self._context is None:
            return False
        try:
            self._context.close()
        finally:
            if self._playwright is not None:
                self._playwright.stop()
            self._playwright = None
            self._context = None
            self._page = None
        logger.info("Browser session closed")
        return True
