"""
FastAPI 애플리케이션 진입점.

실행:
- 개발: uv run uvicorn servekit.app.main:app --reload
- 프로덕션: uv run uvicorn servekit.app.main:app
- 또는: python -m servekit.app.main
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

import yaml
from fastapi import FastAPI, Request
from fastapi.responses import Response

from servekit.app.responses import send_json

# Routes
from servekit.app.routes import pages, static
from servekit.core.filestore import FileStore
from servekit.domain.constants import DEFAULT_ETAG_ALGORITHM
from servekit.domain.errors import ErrorCodes, HTTPError, TemplateExecuteError
from servekit.render.store import TemplateStore
from servekit.render.template_set import FuncMap
from servekit.render.watcher import DirectoryWatcher

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).parent.parent.parent

# =============================================================================
# Configuration
# =============================================================================


def load_config(config_path: Path | None = None) -> dict:
    """설정 파일 로드."""
    if config_path is None:
        # 프로젝트 루트의 default.yaml
        config_path = PROJECT_ROOT / "default.yaml"

    if not config_path.exists():
        return {}

    with open(config_path, encoding="utf-8") as f:
        data: dict[Any, Any] = yaml.safe_load(f) or {}
        return data


def resolve_path(value: str | None, default: str) -> Path:
    """설정 경로 → 절대 경로 (상대 경로는 프로젝트 루트 기준)."""
    path = Path(value or default)
    if not path.is_absolute():
        path = PROJECT_ROOT / path
    return path


def configure_logging(config: dict) -> None:
    level = config.get("logging", {}).get("level", "INFO")
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


# =============================================================================
# Lifespan
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    애플리케이션 생명주기 관리.

    시작 시: 설정 로드, 템플릿 컴파일 (실패 시 시작 중단), watcher 시작
    종료 시: watcher 중단 (감시 구독 해제)
    """
    # Startup
    config = getattr(app.state, "config", None)
    if config is None:
        config = load_config()
    app.state.config = config
    configure_logging(config)

    templates_config = config.get("templates", {})
    static_config = config.get("static", {})

    app.state.template_store = TemplateStore.from_directory(
        resolve_path(templates_config.get("directory"), "templates"),
        getattr(app.state, "template_functions", None),
    )
    app.state.file_store = FileStore.from_directory(
        resolve_path(static_config.get("directory"), "static"),
        algorithm=static_config.get("etag_algorithm", DEFAULT_ETAG_ALGORITHM),
    )

    watcher = None
    if templates_config.get("live_reload", False):
        watcher = DirectoryWatcher(app.state.template_store)
        watcher.start()
    app.state.template_watcher = watcher

    yield

    # Shutdown
    if watcher is not None:
        await watcher.stop()


# =============================================================================
# Error Handling
# =============================================================================


def _pretty_json(request: Request) -> bool:
    return bool(request.app.state.config.get("responses", {}).get("pretty_json", False))


async def http_error_handler(request: Request, exc: HTTPError) -> Response:
    """HTTPError → status + 일반 메시지. 내부 원인은 로그에만."""
    if exc.internal is not None:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return send_json(exc.status_code, exc.to_dict(), pretty=_pretty_json(request))


async def template_error_handler(request: Request, exc: TemplateExecuteError) -> Response:
    """
    TemplateExecuteError → 404 (없는 템플릿) 또는 500.

    실행 에러 상세는 로그에만 남기고 일반 메시지로 응답.
    """
    if exc.code == ErrorCodes.TEMPLATE_NOT_FOUND:
        return send_json(
            404,
            {"code": exc.code, "message": exc.message},
            pretty=_pretty_json(request),
        )

    logger.error(f"{request.method} {request.url.path} template rendering failed: {exc}")
    return send_json(
        500,
        {"code": exc.code, "message": "template rendering failed"},
        pretty=_pretty_json(request),
    )


# =============================================================================
# App Instance
# =============================================================================


def create_app(
    config: dict | None = None,
    functions: FuncMap | None = None,
) -> FastAPI:
    """
    앱 생성.

    Args:
        config: 설정 (None이면 시작 시 default.yaml 로드)
        functions: 템플릿 함수 테이블
    """
    app = FastAPI(
        title="servekit",
        description="템플릿 렌더링 (live reload) + ETag 정적 파일 서버",
        version="0.1.0",
        lifespan=lifespan,
    )
    if config is not None:
        app.state.config = config
    app.state.template_functions = functions

    app.add_exception_handler(HTTPError, http_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(TemplateExecuteError, template_error_handler)  # type: ignore[arg-type]

    app.include_router(pages.router, tags=["Pages"])
    app.include_router(static.router, prefix="/static", tags=["Static"])

    @app.get("/health")
    async def health() -> dict[str, str]:
        """헬스 체크."""
        return {"status": "ok"}

    return app


app = create_app()


# =============================================================================
# CLI Entry Point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    server_config = load_config().get("server", {})
    uvicorn.run(
        "servekit.app.main:app",
        host=server_config.get("host", "127.0.0.1"),
        port=server_config.get("port", 8000),
    )
