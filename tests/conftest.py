"""
Pytest fixtures for servekit tests.

구성:
- 템플릿 디렉터리 (html/text flavor 혼합)
- 정적 파일 디렉터리
- Request 생성 / 응답 본문 수집 헬퍼
"""

import asyncio
from collections.abc import Callable
from pathlib import Path

import pytest
from fastapi import Request
from fastapi.responses import Response, StreamingResponse

# =============================================================================
# Template Fixtures
# =============================================================================

@pytest.fixture
def template_sources() -> dict[str, str]:
    """기본 템플릿 소스."""
    return {
        "page.html": "<p>{{ data }}</p>",
        "msg.text": "hi {{ data }}",
        "mail.text.txt": "Hello {{ name }}!",
        "layout.html": "<main>{% block body %}{% endblock %}</main>",
        "child.html": '{% extends "layout.html" %}{% block body %}{{ data }}{% endblock %}',
    }


@pytest.fixture
def template_dir(tmp_path: Path, template_sources: dict[str, str]) -> Path:
    """템플릿 디렉터리 (하위 디렉터리, 숨김 파일 포함)."""
    directory = tmp_path / "templates"
    directory.mkdir()
    for name, source in template_sources.items():
        (directory / name).write_text(source, encoding="utf-8")

    # 무시 대상
    (directory / ".page.html.swp").write_bytes(b"\x00\x01")
    (directory / "partials").mkdir()
    return directory


# =============================================================================
# Static Fixtures
# =============================================================================

@pytest.fixture
def static_dir(tmp_path: Path) -> Path:
    """정적 파일 디렉터리."""
    directory = tmp_path / "static"
    (directory / "css").mkdir(parents=True)
    (directory / "hello.txt").write_bytes(b"hello, world\n")
    (directory / "css" / "style.css").write_bytes(b"body { margin: 0; }\n")
    (directory / "blob.bin").write_bytes(bytes(range(256)) * 4)
    return directory


# =============================================================================
# HTTP Helpers
# =============================================================================

@pytest.fixture
def make_request() -> Callable[..., Request]:
    """최소 ASGI scope로 Request 생성."""

    def _make(
        method: str = "GET",
        headers: dict[str, str] | None = None,
        path: str = "/",
    ) -> Request:
        scope = {
            "type": "http",
            "method": method,
            "path": path,
            "query_string": b"",
            "headers": [
                (key.lower().encode("latin-1"), value.encode("latin-1"))
                for key, value in (headers or {}).items()
            ],
        }
        return Request(scope)

    return _make


def read_body(response: Response) -> bytes:
    """응답 본문 수집 (StreamingResponse 포함, 전송 후 background task 실행)."""
    if not isinstance(response, StreamingResponse):
        return bytes(response.body)

    async def collect() -> bytes:
        body = b"".join([chunk async for chunk in response.body_iterator])
        if response.background is not None:
            await response.background()
        return body

    return asyncio.run(collect())


@pytest.fixture
def body_of() -> Callable[[Response], bytes]:
    return read_body
