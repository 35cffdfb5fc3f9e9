"""
Error definitions for servekit.

규칙:
- 조용한 실패 금지 → 호출자에게 구조화된 에러로 명시적 실패
- HTTP 계층 에러: status code + (선택) 내부 원인
- 템플릿 에러: code + message + context (로그/JSON 직렬화용)
"""

from http import HTTPStatus
from typing import Any


class HTTPError(Exception):
    """
    HTTP status code와 내부 원인을 함께 운반하는 에러.

    내부 원인(internal)은 로그에만 남기고 사용자에게는
    status code와 reason phrase만 노출한다.

    Usage:
        raise HTTPError(404)
        raise HTTPError(500, internal=e)
    """

    def __init__(self, status_code: int, internal: BaseException | None = None) -> None:
        self.status_code = int(status_code)
        self.internal = internal
        super().__init__(self._format_message())

    @property
    def phrase(self) -> str:
        try:
            return HTTPStatus(self.status_code).phrase
        except ValueError:
            return ""

    def _format_message(self) -> str:
        if self.internal is not None:
            return f"{self.status_code} {self.phrase}: {self.internal}"
        return f"{self.status_code} {self.phrase}"

    def to_dict(self) -> dict[str, Any]:
        """응답 본문용 (내부 원인 제외)."""
        return {
            "code": self.status_code,
            "message": self.phrase,
        }


def not_found() -> HTTPError:
    return HTTPError(HTTPStatus.NOT_FOUND)


def internal_error(cause: BaseException) -> HTTPError:
    return HTTPError(HTTPStatus.INTERNAL_SERVER_ERROR, internal=cause)


class TemplateError(Exception):
    """
    템플릿 관련 에러의 기반 클래스.

    Usage:
        raise TemplateCompileError(ErrorCodes.TEMPLATE_SYNTAX, "unexpected '}'", path=path)
    """

    def __init__(self, code: str, message: str, **context: Any) -> None:
        self.code = code
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        ctx_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
        if ctx_str:
            return f"[{self.code}] {self.message} ({ctx_str})"
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """로그/JSON 직렬화용."""
        return {
            "code": self.code,
            "message": self.message,
            **self.context,
        }


class TemplateCompileError(TemplateError):
    """
    템플릿 세트 구성 실패.

    - 초기 세트: 시작 중단 (fatal)
    - watcher 재로드: 해당 재로드만 중단, 로그 후 이전 스냅샷 유지
    """


class TemplateExecuteError(TemplateError):
    """
    템플릿 실행 실패.

    context["partial"]이 True이면 sink에 일부 출력이 이미 쓰인 상태.
    """


class WatchSetupError(TemplateError):
    """템플릿 디렉터리 감시 생성 실패. 로그만 남기고 live reload 비활성화."""


class RedirectRangeError(ValueError):
    """redirect status code가 3xx 범위 밖인 경우. 응답 생성 전에 발생."""

    def __init__(self, status_code: int) -> None:
        self.status_code = status_code
        super().__init__(
            f"redirect status code should be in 3xx range, but was {status_code}"
        )


# =============================================================================
# Error Codes
# =============================================================================

class ErrorCodes:
    """에러 코드 상수."""

    # === Template compile ===
    TEMPLATE_SYNTAX = "TEMPLATE_SYNTAX"
    TEMPLATE_NAME_CONFLICT = "TEMPLATE_NAME_CONFLICT"
    TEMPLATE_READ_FAILED = "TEMPLATE_READ_FAILED"

    # === Template execute ===
    TEMPLATE_NOT_FOUND = "TEMPLATE_NOT_FOUND"
    RENDER_FAILED = "RENDER_FAILED"

    # === Watcher ===
    WATCH_SETUP_FAILED = "WATCH_SETUP_FAILED"
