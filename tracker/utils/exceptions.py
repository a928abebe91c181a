"""커스텀 HTTP 예외 클래스 모듈.

Custom HTTP exception classes module.
Pre-configured HTTPException subclasses raised by the service layer so call
sites never spell out status codes. Storage-layer failures live in
``tracker.db.errors`` and are mapped to responses in ``tracker.main``.

Usage:
    from tracker.utils.exceptions import NotFoundError, DuplicateError
    raise NotFoundError("Form not found")
    raise DuplicateError("Email already registered")
"""

from typing import Any

from fastapi import HTTPException, status


class NotFoundError(HTTPException):
    """404 Not Found 예외 — 요청한 리소스를 찾을 수 없을 때 사용.

    404 Not Found exception.
    Raised when a form, field, episode, or user does not exist.

    Args:
        detail: 오류 메시지 (Error message, default: "Resource not found")
    """

    def __init__(self, detail: str = "Resource not found") -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class DuplicateError(HTTPException):
    """409 Conflict 예외 — 고유성 위반 (e.g. 이미 등록된 이메일).

    409 Conflict exception.
    Raised when creating or updating a user would duplicate an email.

    Args:
        detail: 오류 메시지 (Error message, default: "Resource already exists")
    """

    def __init__(self, detail: str = "Resource already exists") -> None:
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class ForbiddenError(HTTPException):
    """403 Forbidden 예외 — 역할 또는 소유권 부족.

    403 Forbidden exception.
    Raised when the caller's role is not allowed, or a non-owner tries to
    change someone else's episode.

    Args:
        detail: 오류 메시지 (Error message, default: "Insufficient permissions")
    """

    def __init__(self, detail: str = "Insufficient permissions") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class UnauthorizedError(HTTPException):
    """401 Unauthorized 예외 — 토큰 누락/만료/무효, 비활성 사용자.

    401 Unauthorized exception.

    Args:
        detail: 오류 메시지 (Error message, default: "Authentication required")
    """

    def __init__(self, detail: str = "Authentication required") -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class BadRequestError(HTTPException):
    """400 Bad Request 예외 — Pydantic 검증 이후의 비즈니스 규칙 위반.

    400 Bad Request exception.
    Raised when request data is invalid beyond what schema validation
    catches (e.g. a merged field patch leaves a select without options).

    Args:
        detail: 오류 메시지 (Error message, default: "Bad request")
    """

    def __init__(self, detail: str = "Bad request") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class ValidationFailedError(HTTPException):
    """400 예외 — 에피소드 데이터가 폼 필드 규칙을 위반.

    400 exception carrying a per-field error map.
    Raised when submitted episode ``data`` violates its form's field rules.

    Args:
        errors: 필드 ID → 오류 정보 (Field id to ``{"code", "value"}``)
    """

    def __init__(self, errors: dict[str, Any]) -> None:
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "validation", "errors": errors},
        )
        self.errors = errors
