"""
test_api_pages.py - 페이지 렌더링 E2E 테스트

엔드포인트:
- GET /health
- GET /
- GET /pages/{name}
"""

import time
from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient

from servekit.domain.errors import TemplateCompileError

# =============================================================================
# Health Check
# =============================================================================


class TestHealthCheck:
    """헬스 체크 테스트."""

    def test_health_endpoint(self, client: TestClient):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


# =============================================================================
# Pages
# =============================================================================


class TestPages:
    """페이지 렌더링 테스트."""

    def test_index(self, client: TestClient):
        response = client.get("/")

        assert response.status_code == 200
        assert response.text == "<h1>home /</h1>"
        assert response.headers["content-type"].startswith("text/html")

    def test_query_is_escaped(self, client: TestClient):
        response = client.get("/pages/hello.html", params={"name": "<script>"})

        assert response.text == "<p>hello &lt;script&gt;</p>"

    def test_text_flavor_not_escaped(self, client: TestClient):
        response = client.get("/pages/notes.text.txt", params={"q": "<b>"})

        assert response.text == "raw <b>"

    def test_extends(self, client: TestClient):
        response = client.get("/pages/about.html")

        assert response.text == "<main>about</main>"

    def test_unknown_template(self, client: TestClient):
        response = client.get("/pages/nope.html")

        assert response.status_code == 404
        assert response.json()["code"] == "TEMPLATE_NOT_FOUND"

    def test_render_failure(self, client: TestClient):
        response = client.get("/pages/broken.html")

        assert response.status_code == 500
        assert response.json() == {
            "code": "RENDER_FAILED",
            "message": "template rendering failed",
        }

    def test_template_functions(self, make_client, site_config: dict[str, Any], site_templates: Path):
        (site_templates / "shout.html").write_text("{{ shout(path) }}", encoding="utf-8")

        client = make_client(site_config, functions={"shout": str.upper})
        response = client.get("/pages/shout.html")

        assert response.text == "/PAGES/SHOUT.HTML"


# =============================================================================
# Startup
# =============================================================================


class TestStartup:
    """시작 시 템플릿 컴파일 테스트."""

    def test_compile_failure_aborts_startup(self, make_client, site_config: dict[str, Any], site_templates: Path):
        (site_templates / "bad.html").write_text("{% if %}", encoding="utf-8")

        with pytest.raises(TemplateCompileError):
            make_client(site_config)

    def test_pretty_json_errors(self, make_client, site_config: dict[str, Any]):
        site_config["responses"]["pretty_json"] = True
        client = make_client(site_config)

        response = client.get("/pages/nope.html")

        assert "\n\t" in response.text


# =============================================================================
# Live Reload
# =============================================================================


class TestLiveReload:
    """live reload 테스트."""

    TIMEOUT = 15.0

    def test_modified_template_served(self, make_client, site_config: dict[str, Any], site_templates: Path):
        site_config["templates"]["live_reload"] = True
        client = make_client(site_config)
        assert client.get("/").text == "<h1>home /</h1>"

        path = site_templates / "index.html"
        deadline = time.monotonic() + self.TIMEOUT
        text = ""
        while time.monotonic() < deadline:
            # 감시 준비 전의 쓰기는 놓칠 수 있으므로 반복
            path.write_text("<h2>reloaded</h2>", encoding="utf-8")
            time.sleep(0.5)
            text = client.get("/").text
            if text == "<h2>reloaded</h2>":
                break

        assert text == "<h2>reloaded</h2>"

    def test_reload_disabled(self, client: TestClient, site_templates: Path):
        (site_templates / "index.html").write_text("<h2>changed</h2>", encoding="utf-8")

        assert client.app.state.template_watcher is None
        assert client.get("/").text == "<h1>home /</h1>"
