"""
응답 헬퍼: raw bytes, JSON, redirect, 렌더된 템플릿.

모두 상태 없는 단발성 래퍼. 응답 객체를 만들기 전에 검증/렌더를 끝내므로
실패 시 일부만 쓰인 응답은 생기지 않는다.
"""

import io
import json
from typing import Any

from fastapi.responses import HTMLResponse, RedirectResponse, Response

from servekit.domain.constants import CONTENT_TYPE_HTML, CONTENT_TYPE_JSON
from servekit.domain.errors import RedirectRangeError
from servekit.render.store import TemplateStore


def send_blob(status_code: int, content_type: str, data: bytes) -> Response:
    return Response(content=data, status_code=status_code, media_type=content_type)


def send_json(status_code: int, value: Any, pretty: bool = False) -> Response:
    """
    JSON 응답.

    Args:
        status_code: HTTP status
        value: 직렬화할 값
        pretty: True면 탭 들여쓰기

    Raises:
        TypeError: 직렬화 불가능한 값
    """
    if pretty:
        data = json.dumps(value, indent="\t", ensure_ascii=False)
    else:
        data = json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    return send_blob(status_code, CONTENT_TYPE_JSON, data.encode("utf-8"))


def send_redirect(status_code: int, url: str) -> RedirectResponse:
    """
    Redirect 응답.

    Raises:
        RedirectRangeError: status_code가 300~399 밖
    """
    if status_code < 300 or status_code > 399:
        raise RedirectRangeError(status_code)
    return RedirectResponse(url=url, status_code=status_code)


def send_template(
    status_code: int,
    store: TemplateStore,
    name: str,
    data: Any = None,
) -> HTMLResponse:
    """
    템플릿을 버퍼에 끝까지 렌더한 뒤 HTML 응답.

    Raises:
        TemplateExecuteError
    """
    buffer = io.StringIO()
    store.render(buffer, name, data)
    return HTMLResponse(
        content=buffer.getvalue(),
        status_code=status_code,
        media_type=CONTENT_TYPE_HTML,
    )
