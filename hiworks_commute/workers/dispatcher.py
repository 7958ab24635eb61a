import json
from collections.abc import Callable, Iterable
from typing import Any, TextIO

from hiworks_commute.api.schemas import (
    ActionResult,
    Command,
    ReadySignal,
    Response,
    SetCompanyUrlParams,
    SetPasswordParams,
    SetUsernameParams,
)
from hiworks_commute.core.errors import ProtocolError
from hiworks_commute.core.logging import get_logger
from hiworks_commute.services.attendance import STATUS_CHANGES, AttendanceService
from hiworks_commute.services.credential_store import CredentialStore


logger = get_logger(__name__)

Handler = Callable[[dict[str, Any]], ActionResult]


def normalize_result(command_id: Any, result: ActionResult) -> Response:
    if result.has_data:
        data = result.data
    elif result.message is not None:
        data = result.message
    else:
        data = result.model_dump()
    return Response(id=command_id, success=result.ok, data=data)


def parse_line(line: str) -> Command:
    try:
        payload = json.loads(line)
    except json.JSONDecodeError as exc:
        raise ProtocolError(f"Invalid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise ProtocolError(f"Expected a JSON object, got {type(payload).__name__}")
    return Command.model_validate(payload)


class CommandDispatcher:
    """Reads one JSON command per line and writes one JSON response per command.

    Commands run strictly one after another; a response is written and flushed
    before the next line is read.
    """

    def __init__(self, store: CredentialStore, attendance: AttendanceService, output: TextIO) -> None:
        self.store = store
        self.attendance = attendance
        self.output = output
        self.handlers: dict[str, Handler] = {
            "setCompanyUrl": self._set_company_url,
            "getCompanyUrl": lambda params: ActionResult.with_data(self.store.get("company_url")),
            "setUsername": self._set_username,
            "getUsername": lambda params: ActionResult.with_data(self.store.get("username")),
            "setPassword": self._set_password,
            "hasPassword": lambda params: ActionResult.with_data(self.store.has_secret()),
            "openLogin": lambda params: self.attendance.open_login(),
            "checkIn": lambda params: self.attendance.check_in(),
            "checkOut": lambda params: self.attendance.check_out(),
            "getStatus": lambda params: self.attendance.get_status(),
            "isLoggedIn": lambda params: self.attendance.is_logged_in(),
            "close": lambda params: self.attendance.close(),
        }
        for action, change in STATUS_CHANGES.items():
            self.handlers[action] = lambda params, change=change: self.attendance.change_status(change)

    def announce_ready(self) -> None:
        self._emit(ReadySignal().model_dump_json())

    def serve(self, lines: Iterable[str]) -> None:
        for line in lines:
            if not line.strip():
                continue
            try:
                command = parse_line(line)
            except ProtocolError as exc:
                logger.error("Protocol error", extra={"extra": {"error": str(exc), "line": line.rstrip()[:200]}})
                continue
            self.respond(self.handle(command))

    def handle(self, command: Command) -> Response:
        handler = self.handlers.get(command.action_name or "")
        if handler is None:
            logger.warning("Unknown action", extra={"extra": {"id": command.id, "action": command.action}})
            return normalize_result(command.id, ActionResult.failure(f"알 수 없는 명령: {command.action}"))

        logger.info("Handling command", extra={"extra": {"id": command.id, "action": command.action}})
        try:
            result = handler(command.param_dict)
        except Exception as exc:
            logger.exception("Command failed", extra={"extra": {"id": command.id, "action": command.action}})
            return Response(id=command.id, success=False, data=str(exc))
        return normalize_result(command.id, result)

    def respond(self, response: Response) -> None:
        self._emit(response.model_dump_json())

    def _emit(self, line: str) -> None:
        self.output.write(line + "\n")
        self.output.flush()

    def _set_company_url(self, params: dict[str, Any]) -> ActionResult:
        self.store.set("company_url", SetCompanyUrlParams.model_validate(params).url)
        return ActionResult.with_message("회사 URL이 설정되었습니다")

    def _set_username(self, params: dict[str, Any]) -> ActionResult:
        self.store.set("username", SetUsernameParams.model_validate(params).username)
        return ActionResult.with_message("아이디가 저장되었습니다")

    def _set_password(self, params: dict[str, Any]) -> ActionResult:
        self.store.set("password", SetPasswordParams.model_validate(params).password)
        return ActionResult.with_message("비밀번호가 저장되었습니다")
