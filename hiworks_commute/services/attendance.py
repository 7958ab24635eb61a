from typing import NamedTuple

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from hiworks_commute.api.schemas import ActionResult, AttendanceStatus, ManualLoginOutcome
from hiworks_commute.core.config import Settings
from hiworks_commute.core.errors import ElementNotFoundError, WorkerError
from hiworks_commute.core.logging import get_logger
from hiworks_commute.services.browser_session import BrowserSession
from hiworks_commute.services.credential_store import CredentialStore
from hiworks_commute.services.login_flow import LoginFlow, is_authenticated_url, is_login_url


logger = get_logger(__name__)

ATTENDANCE_BUTTON = '.division-list button:has-text("{label}")'
STATUS_BUTTON = '.list-btns button:has-text("{label}")'
CHECK_TIME = ".check-time"
STATUS_TAG = ".timer-wrapper .tag"
UNKNOWN_STATUS = "알 수 없음"


class AttendanceButton(NamedTuple):
    label: str
    done_prefix: str
    already_prefix: str
    expects_prompt: bool


class StatusChange(NamedTuple):
    label: str
    success_message: str
    already_message: str


CHECK_IN = AttendanceButton("출근하기", "출근 완료", "이미 출근 완료", expects_prompt=False)
CHECK_OUT = AttendanceButton("퇴근하기", "퇴근 완료", "이미 퇴근 완료", expects_prompt=True)

STATUS_CHANGES = {
    "setWork": StatusChange("업무", "업무 상태로 변경됨", "이미 업무 중입니다"),
    "goOut": StatusChange("외출", "외출 처리 완료", "이미 외출 중입니다"),
    "setMeeting": StatusChange("회의", "회의 상태로 변경됨", "이미 회의 중입니다"),
    "setOutwork": StatusChange("외근", "외근 상태로 변경됨", "이미 외근 중입니다"),
}


class AttendanceService:
    """Check-in, check-out and presence changes on the personal work page."""

    def __init__(
        self,
        session: BrowserSession,
        store: CredentialStore,
        settings: Settings,
        login_flow: LoginFlow | None = None,
    ) -> None:
        self.session = session
        self.store = store
        self.settings = settings
        self.login_flow = login_flow or LoginFlow(session, store, settings)

    def navigate_to_work_page(self):
        company_url = self.store.require("company_url")
        self.store.require("password")

        if is_login_url(self.session.goto(company_url), self.settings):
            self.login_flow.run()

        work_url = self.settings.work_page_url
        landed = self.session.goto(work_url)
        # Right after login the site bounces to its main page once.
        if self.settings.main_page_marker in landed:
            self.session.goto(work_url)
        return self.session.ensure()

    def check_in(self) -> ActionResult:
        return self._press_attendance_button(CHECK_IN, self.settings.check_in_skip_if_done)

    def check_out(self) -> ActionResult:
        return self._press_attendance_button(CHECK_OUT, self.settings.check_out_skip_if_done)

    def change_status(self, change: StatusChange) -> ActionResult:
        page = self.navigate_to_work_page()
        button = page.locator(STATUS_BUTTON.format(label=change.label))

        if self._is_disabled(button, change.label):
            logger.info("Status already active", extra={"extra": {"label": change.label}})
            return ActionResult.with_message(change.already_message)

        button.click()
        self.session.wait(self.settings.action_settle_ms)
        logger.info("Status changed", extra={"extra": {"label": change.label}})
        return ActionResult.with_message(change.success_message)

    def get_status(self) -> ActionResult:
        try:
            page = self.navigate_to_work_page()
            check_in_time = self._read_text(
                page.locator(ATTENDANCE_BUTTON.format(label=CHECK_IN.label)).locator(CHECK_TIME)
            )
            check_out_time = self._read_text(
                page.locator(ATTENDANCE_BUTTON.format(label=CHECK_OUT.label)).locator(CHECK_TIME)
            )
            try:
                status = self._read_text(page.locator(STATUS_TAG))
            except (ElementNotFoundError, PlaywrightError):
                status = UNKNOWN_STATUS
        except (WorkerError, PlaywrightError) as exc:
            logger.warning("Status query failed", extra={"extra": {"error": str(exc)}})
            return ActionResult.failure(str(exc))

        snapshot = AttendanceStatus(check_in_time=check_in_time, check_out_time=check_out_time, status=status)
        return ActionResult.with_data(snapshot.model_dump(by_alias=True))

    def open_login(self) -> ActionResult:
        company_url = self.store.require("company_url")

        if not is_login_url(self.session.goto(company_url), self.settings):
            return self._login_outcome("이미 로그인되어 있습니다", needs_manual_login=False)

        if self.store.get("username") and self.store.has_secret():
            try:
                self.login_flow.run()
            except (WorkerError, PlaywrightError) as exc:
                logger.warning("Automatic login failed", extra={"extra": {"error": str(exc)}})
                self.session.surface_for_manual_login()
                return self._login_outcome(f"자동 로그인 실패: {exc}. 수동으로 로그인해주세요.", needs_manual_login=True)
            return self._login_outcome("자동 로그인 완료", needs_manual_login=False)

        self.session.surface_for_manual_login()
        return self._login_outcome("브라우저가 열렸습니다. 로그인해주세요.", needs_manual_login=True)

    def is_logged_in(self) -> ActionResult:
        if not self.session.is_active:
            return ActionResult.with_data(False)
        return ActionResult.with_data(is_authenticated_url(self.session.current_url(), self.settings))

    def close(self) -> ActionResult:
        self.session.close()
        return ActionResult.with_message("브라우저가 종료되었습니다")

    def _press_attendance_button(self, action: AttendanceButton, skip_if_done: bool) -> ActionResult:
        page = self.navigate_to_work_page()
        button = page.locator(ATTENDANCE_BUTTON.format(label=action.label))

        if skip_if_done and self._is_disabled(button, action.label):
            recorded = self._read_text(button.locator(CHECK_TIME))
            logger.info("Attendance already recorded", extra={"extra": {"label": action.label, "time": recorded}})
            return ActionResult.with_message(f"{action.already_prefix}: {recorded}")

        if action.expects_prompt:
            with self.session.expect_prompt(self.settings.prompt_timeout_ms):
                button.click()
        else:
            button.click()
        self.session.wait(self.settings.action_settle_ms)

        recorded = self._read_text(button.locator(CHECK_TIME))
        logger.info("Attendance recorded", extra={"extra": {"label": action.label, "time": recorded}})
        return ActionResult.with_message(f"{action.done_prefix}: {recorded}")

    def _is_disabled(self, locator, label: str) -> bool:
        try:
            return locator.get_attribute("disabled", timeout=self.settings.element_timeout_ms) is not None
        except PlaywrightTimeoutError as exc:
            raise ElementNotFoundError(f"'{label}' 버튼을 찾을 수 없습니다") from exc

    def _read_text(self, locator) -> str:
        try:
            text = locator.text_content(timeout=self.settings.element_timeout_ms)
        except PlaywrightTimeoutError as exc:
            raise ElementNotFoundError("화면에서 시간 정보를 찾을 수 없습니다") from exc
        return (text or "").strip()

    @staticmethod
    def _login_outcome(message: str, needs_manual_login: bool) -> ActionResult:
        outcome = ManualLoginOutcome(message=message, needs_manual_login=needs_manual_login)
        return ActionResult.with_data(outcome.model_dump(by_alias=True))
