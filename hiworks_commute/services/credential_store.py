import os
from pathlib import Path

from pydantic import ValidationError

from hiworks_commute.api.schemas import Credentials
from hiworks_commute.core.errors import ConfigurationError
from hiworks_commute.core.logging import get_logger


logger = get_logger(__name__)

FIELDS = ("company_url", "username", "password")

MISSING_MESSAGES = {
    "company_url": "회사 URL이 설정되지 않았습니다",
    "username": "아이디가 설정되지 않았습니다. 설정에서 이메일을 입력해주세요.",
    "password": "비밀번호가 설정되지 않았습니다. 설정에서 비밀번호를 입력해주세요.",
}


def _load(path: Path) -> Credentials:
    if not path.exists():
        return Credentials()
    try:
        return Credentials.model_validate_json(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, ValidationError) as exc:
        logger.warning(
            "Ignoring unreadable credential file",
            extra={"extra": {"path": str(path), "error": str(exc)}},
        )
        return Credentials()


class CredentialStore:
    """Company URL, username and password kept in one JSON record.

    The file on disk is the source of truth across restarts; every ``set``
    rewrites it completely before returning.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self._credentials = _load(path)

    def get(self, field: str) -> str | None:
        self._check_field(field)
        return getattr(self._credentials, field)

    def set(self, field: str, value: str | None) -> None:
        self._check_field(field)
        updated = self._credentials.model_copy(update={field: value})
        self._write(updated)
        self._credentials = updated
        logger.info("Credential field updated", extra={"extra": {"field": field}})

    def has_secret(self) -> bool:
        return bool(self._credentials.password)

    def require(self, field: str) -> str:
        # Empty strings count as missing.
        value = self.get(field)
        if not value:
            raise ConfigurationError(MISSING_MESSAGES[field])
        return value

    def _write(self, credentials: Credentials) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(".tmp")
        tmp_path.write_text(
            credentials.model_dump_json(by_alias=True, indent=2),
            encoding="utf-8",
        )
        os.chmod(tmp_path, 0o600)
        os.replace(tmp_path, self.path)

    @staticmethod
    def _check_field(field: str) -> None:
        if field not in FIELDS:
            raise KeyError(f"Unknown credential field: {field}")
