"""
Static Routes: 정적 파일 전송.

- GET /static/{path} → FileStore.send_file (ETag, Range, 조건부 요청)

sync 엔드포인트: threadpool에서 실행 (파일 I/O, 해시 계산이 요청 스레드를 블록)
"""

from fastapi import APIRouter, Request
from fastapi.responses import Response

from servekit.core.filestore import FileStore

router = APIRouter()


def get_file_store(request: Request) -> FileStore:
    """app.state에서 FileStore 조회."""
    store: FileStore = request.app.state.file_store
    return store


@router.api_route("/{path:path}", methods=["GET", "HEAD"])
def static_file(request: Request, path: str) -> Response:
    """
    정적 파일.

    HTTPError(404/500)는 app의 exception handler가 응답으로 변환.
    """
    return get_file_store(request).send_file(request, path)
