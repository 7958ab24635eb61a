from typing import Any

from pydantic import BaseModel, Field


class Credentials(BaseModel):
    company_url: str | None = Field(default=None, alias="companyUrl")
    username: str | None = None
    password: str | None = None

    model_config = {"populate_by_name": True}


class Command(BaseModel):
    # Any JSON object with an id gets a response, so nothing is rejected here.
    id: Any = None
    action: Any = None
    params: Any = None

    @property
    def action_name(self) -> str | None:
        return self.action if isinstance(self.action, str) else None

    @property
    def param_dict(self) -> dict[str, Any]:
        return self.params if isinstance(self.params, dict) else {}


class Response(BaseModel):
    id: Any = None
    success: bool
    data: Any = None


class ReadySignal(BaseModel):
    ready: bool = True


class SetCompanyUrlParams(BaseModel):
    url: str


class SetUsernameParams(BaseModel):
    username: str


class SetPasswordParams(BaseModel):
    password: str


class AttendanceStatus(BaseModel):
    check_in_time: str | None = Field(default=None, alias="checkInTime")
    check_out_time: str | None = Field(default=None, alias="checkOutTime")
    status: str

    model_config = {"populate_by_name": True}


class ManualLoginOutcome(BaseModel):
    message: str
    needs_manual_login: bool = Field(default=False, alias="needsManualLogin")

    model_config = {"populate_by_name": True}


class ActionResult(BaseModel):
    """Outcome of one worker operation.

    ``data`` is only meaningful when it was set explicitly; a result built with
    ``with_data(None)`` still reports ``data`` (as null) on the wire, while one
    built with ``with_message`` reports the message instead.
    """

    ok: bool = True
    data: Any = None
    message: str | None = None

    @classmethod
    def with_data(cls, value: Any) -> "ActionResult":
        return cls(ok=True, data=value)

    @classmethod
    def with_message(cls, message: str) -> "ActionResult":
        return cls(ok=True, message=message)

    @classmethod
    def failure(cls, message: str) -> "ActionResult":
        return cls(ok=False, message=message)

    @property
    def has_data(self) -> bool:
        return "data" in self.model_fields_set
