"""
E2E 테스트용 앱 설정.

구성:
- tmp 디렉터리에 템플릿/정적 파일 생성
- create_app(config=...)로 앱 생성 (default.yaml 대신 테스트 설정)
- TestClient는 with 블록으로 lifespan 실행
"""

from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient

from servekit.app.main import create_app

# =============================================================================
# 상수
# =============================================================================

SITE_TEMPLATES = {
    "index.html": "<h1>home {{ path }}</h1>",
    "hello.html": "<p>hello {{ query.get('name', 'guest') }}</p>",
    "layout.html": "<main>{% block body %}{% endblock %}</main>",
    "about.html": '{% extends "layout.html" %}{% block body %}about{% endblock %}',
    "broken.html": "{{ missing_variable }}",
    "notes.text.txt": "raw {{ query.get('q', '') }}",
}

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def site_templates(tmp_path: Path) -> Path:
    directory = tmp_path / "templates"
    directory.mkdir()
    for name, source in SITE_TEMPLATES.items():
        (directory / name).write_text(source, encoding="utf-8")
    return directory


@pytest.fixture
def site_config(site_templates: Path, static_dir: Path) -> dict[str, Any]:
    """테스트용 설정 (default.yaml과 같은 구조)."""
    return {
        "templates": {"directory": str(site_templates), "live_reload": False},
        "static": {"directory": str(static_dir), "etag_algorithm": "sha256"},
        "responses": {"pretty_json": False},
        "logging": {"level": "DEBUG"},
    }


@pytest.fixture
def make_client() -> Generator[Callable[..., TestClient], None, None]:
    """설정으로 TestClient 생성 (lifespan 포함). 테스트 종료 시 정리."""
    clients: list[TestClient] = []

    def _make(config: dict[str, Any], **kwargs: Any) -> TestClient:
        client = TestClient(create_app(config=config, **kwargs))
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def client(make_client, site_config: dict[str, Any]) -> TestClient:
    return make_client(site_config)
