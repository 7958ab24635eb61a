from enum import Enum


class AuthState(str, Enum):
    UNKNOWN = "UNKNOWN"
    ON_LOGIN_PAGE = "ON_LOGIN_PAGE"
    AWAITING_IDENTITY = "AWAITING_IDENTITY"
    AWAITING_SECRET = "AWAITING_SECRET"
    AUTHENTICATED = "AUTHENTICATED"
    LOGIN_FAILED = "LOGIN_FAILED"
