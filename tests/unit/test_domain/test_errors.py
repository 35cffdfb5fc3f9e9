"""
test_errors.py - 에러 타입 테스트

DoD:
- HTTPError: status code + reason phrase, 내부 원인은 응답 본문에 포함하지 않음
- TemplateError: code + message + context 직렬화
"""

from http import HTTPStatus

import pytest

from servekit.domain.errors import (
    ErrorCodes,
    HTTPError,
    RedirectRangeError,
    TemplateCompileError,
    TemplateError,
    internal_error,
    not_found,
)


class TestHTTPError:
    """HTTPError 테스트."""

    def test_not_found(self):
        error = not_found()

        assert error.status_code == 404
        assert error.internal is None
        assert error.to_dict() == {"code": 404, "message": "Not Found"}
        assert str(error) == "404 Not Found"

    def test_internal_error_hides_cause(self):
        cause = PermissionError("denied: /srv/secret")
        error = internal_error(cause)

        assert error.status_code == 500
        assert error.internal is cause
        assert error.to_dict() == {"code": 500, "message": "Internal Server Error"}
        assert "denied" in str(error)

    def test_status_is_plain_int(self):
        error = HTTPError(HTTPStatus.NOT_FOUND)

        assert type(error.status_code) is int

    def test_unknown_status_phrase(self):
        assert HTTPError(599).phrase == ""


class TestTemplateError:
    """TemplateError 테스트."""

    def test_message_with_context(self):
        error = TemplateCompileError(ErrorCodes.TEMPLATE_SYNTAX, "unexpected end", name="a.html", lineno=3)

        assert str(error) == "[TEMPLATE_SYNTAX] unexpected end (name='a.html', lineno=3)"
        assert error.to_dict() == {
            "code": "TEMPLATE_SYNTAX",
            "message": "unexpected end",
            "name": "a.html",
            "lineno": 3,
        }

    def test_message_without_context(self):
        error = TemplateError("X", "boom")

        assert str(error) == "[X] boom"


class TestRedirectRangeError:
    """RedirectRangeError 테스트."""

    def test_is_value_error(self):
        with pytest.raises(ValueError, match="3xx range, but was 200"):
            raise RedirectRangeError(200)
