"""
Page Routes: 템플릿 렌더링.

- GET / → index.html
- GET /pages/{name} → 임의 템플릿
"""

from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

from servekit.app.responses import send_template
from servekit.render.store import TemplateStore

router = APIRouter()

INDEX_TEMPLATE = "index.html"


def get_template_store(request: Request) -> TemplateStore:
    """app.state에서 TemplateStore 조회."""
    store: TemplateStore = request.app.state.template_store
    return store


def _page_data(request: Request) -> dict[str, Any]:
    return {
        "path": request.url.path,
        "query": dict(request.query_params),
    }


def _render(request: Request, name: str) -> HTMLResponse:
    # TemplateExecuteError는 app의 exception handler가 404/500으로 변환
    return send_template(200, get_template_store(request), name, _page_data(request))


@router.get("/", response_class=HTMLResponse)
def index_page(request: Request) -> HTMLResponse:
    """홈 페이지."""
    return _render(request, INDEX_TEMPLATE)


@router.get("/pages/{name}", response_class=HTMLResponse)
def template_page(request: Request, name: str) -> HTMLResponse:
    """이름으로 템플릿 페이지 렌더."""
    return _render(request, name)
