"""
조건부 전송 (serve content with metadata).

호출자는 메타데이터(ETag 헤더, 수정 시각)와 seek 가능한 reader만 넘긴다.
여기서 처리:
- Content-Type: 파일명 → mimetypes, 실패 시 앞 512바이트 sniffing
- Last-Modified
- 조건부 요청: If-Match, If-Unmodified-Since (412),
  If-None-Match, If-Modified-Since (304)
- Range: 단일 bytes 범위 → 206, 불가능한 범위 → 416
  (해석 불가 헤더는 무시)
  (다중 범위는 전체 200으로 응답)

304 응답과 Range 예외는 Starlette 것을 그대로 쓴다. 전제 조건 판정은
If-Match/If-Unmodified-Since(412)까지 포함해야 하므로 여기서 한다.
"""

import io
import logging
import mimetypes
from collections.abc import Callable, Iterator, Mapping
from datetime import UTC, datetime
from email.utils import format_datetime, parsedate_to_datetime
from typing import BinaryIO

from fastapi import Request
from fastapi.responses import Response, StreamingResponse
from starlette.background import BackgroundTask
from starlette.datastructures import Headers
from starlette.responses import MalformedRangeHeader, RangeNotSatisfiable
from starlette.staticfiles import NotModifiedResponse

from servekit.domain.constants import SEND_CHUNK_SIZE, SNIFF_LENGTH

logger = logging.getLogger(__name__)


# =============================================================================
# Header Helpers
# =============================================================================

def _is_zero_time(mod_time: datetime | None) -> bool:
    return mod_time is None or mod_time.timestamp() <= 0


def _http_date(value: datetime) -> str:
    return format_datetime(value.astimezone(UTC), usegmt=True)


def _parse_http_date(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _truncate_seconds(value: datetime) -> datetime:
    # HTTP 날짜는 초 단위
    return value.replace(microsecond=0)


def _etag_list(header: str) -> list[str]:
    return [tag.strip() for tag in header.split(",") if tag.strip()]


def _strong_match(a: str, b: str) -> bool:
    return a == b and a != "" and not a.startswith("W/")


def _weak_match(a: str, b: str) -> bool:
    return a.removeprefix("W/") == b.removeprefix("W/")


def _detect_content_type(name: str, reader: BinaryIO) -> str:
    content_type, _ = mimetypes.guess_type(name)
    if content_type is None:
        head = reader.read(SNIFF_LENGTH)
        reader.seek(0)
        content_type = _sniff(head)
    elif content_type.startswith("text/"):
        content_type += "; charset=utf-8"
    return content_type


def _sniff(head: bytes) -> str:
    if b"\x00" in head:
        return "application/octet-stream"
    try:
        head.decode("utf-8")
    except UnicodeDecodeError as e:
        # 앞부분을 자르다 멀티바이트 문자 중간에서 끊긴 경우는 텍스트로 본다
        if e.start < len(head) - 3:
            return "application/octet-stream"
    return "text/plain; charset=utf-8"


# =============================================================================
# Preconditions
# =============================================================================

def check_preconditions(
    request: Request,
    etag: str | None,
    mod_time: datetime | None,
) -> int | None:
    """
    조건부 요청 평가.

    Returns:
        304/412 (즉시 응답해야 하는 status) 또는 None (계속 진행)
    """
    headers = request.headers
    method = request.method

    if_match = headers.get("if-match")
    if if_match is not None:
        tags = _etag_list(if_match)
        if "*" not in tags and not (etag and any(_strong_match(t, etag) for t in tags)):
            return 412
    elif not _is_zero_time(mod_time):
        since = _parse_http_date(headers.get("if-unmodified-since"))
        if since is not None and _truncate_seconds(mod_time) > since:
            return 412

    if_none_match = headers.get("if-none-match")
    if if_none_match is not None:
        tags = _etag_list(if_none_match)
        if "*" in tags or (etag and any(_weak_match(t, etag) for t in tags)):
            return 304 if method in ("GET", "HEAD") else 412
    elif method in ("GET", "HEAD") and not _is_zero_time(mod_time):
        since = _parse_http_date(headers.get("if-modified-since"))
        if since is not None and _truncate_seconds(mod_time) <= since:
            return 304

    return None


def _range_applies(request: Request, etag: str | None, mod_time: datetime | None) -> bool:
    """If-Range가 있으면 현재 표현과 일치할 때만 Range 적용."""
    if_range = request.headers.get("if-range")
    if if_range is None:
        return True
    if if_range.startswith('"') or if_range.startswith("W/"):
        return bool(etag) and _strong_match(if_range, etag)
    since = _parse_http_date(if_range)
    return (
        since is not None
        and not _is_zero_time(mod_time)
        and _truncate_seconds(mod_time) == since
    )


def parse_range(header: str, size: int) -> list[tuple[int, int]]:
    """
    Range 헤더 파싱.

    Returns:
        (start, length) 목록 (1개 이상)

    Raises:
        MalformedRangeHeader: 해석할 수 없는 헤더 (호출자는 Range를 무시)
        RangeNotSatisfiable: 모든 범위가 컨텐츠 밖
    """
    unit, _, spec = header.partition("=")
    if unit.strip().lower() != "bytes" or not spec:
        raise MalformedRangeHeader("Only support bytes range")

    ranges = []
    no_overlap = False
    for part in spec.split(","):
        part = part.strip()
        if not part:
            continue
        start_s, sep, end_s = part.partition("-")
        start_s, end_s = start_s.strip(), end_s.strip()
        if not sep or not (start_s.isdigit() or start_s == "") or not (end_s.isdigit() or end_s == ""):
            raise MalformedRangeHeader()

        if start_s == "":
            # suffix 범위: 마지막 N 바이트
            if end_s == "":
                raise MalformedRangeHeader()
            suffix = int(end_s)
            if suffix == 0:
                no_overlap = True
                continue
            suffix = min(suffix, size)
            ranges.append((size - suffix, suffix))
            continue

        start = int(start_s)
        if start >= size:
            no_overlap = True
            continue
        end = size - 1 if end_s == "" else min(int(end_s), size - 1)
        if end < start:
            raise MalformedRangeHeader("Range header: start must not exceed end")
        ranges.append((start, end - start + 1))

    if not ranges:
        if no_overlap:
            raise RangeNotSatisfiable(size)
        raise MalformedRangeHeader("Range header: range must be requested")
    return ranges


# =============================================================================
# Body
# =============================================================================

def _iter_body(reader: BinaryIO, start: int, length: int) -> Iterator[bytes]:
    reader.seek(start)
    remaining = length
    while remaining > 0:
        chunk = reader.read(min(SEND_CHUNK_SIZE, remaining))
        if not chunk:
            break
        remaining -= len(chunk)
        yield chunk


def serve_content(
    request: Request,
    name: str,
    mod_time: datetime | None,
    reader: BinaryIO,
    headers: Mapping[str, str] | None = None,
    on_close: Callable[[], None] | None = None,
) -> Response:
    """
    reader의 내용을 조건부/범위 요청 규칙에 따라 전송.

    Args:
        request: 요청
        name: Content-Type 추정용 파일명
        mod_time: 수정 시각 (None 또는 epoch이면 날짜 관련 처리 생략)
        reader: seek 가능한 바이너리 reader
        headers: 미리 정해진 응답 헤더 (예: ETag)
        on_close: reader 정리. 본문이 있으면 전송 후 background task로,
            본문 없는 응답은 즉시 호출.

    Returns:
        200/206/304/412/416 응답
    """
    response_headers = dict(headers or {})
    etag = response_headers.get("ETag")

    if not _is_zero_time(mod_time):
        response_headers["Last-Modified"] = _http_date(mod_time)

    def finish(response: Response) -> Response:
        if on_close is not None:
            on_close()
        return response

    status = check_preconditions(request, etag, mod_time)
    if status == 304:
        return finish(NotModifiedResponse(Headers(headers=response_headers)))
    if status == 412:
        return finish(Response(status_code=412))

    size = reader.seek(0, io.SEEK_END)
    reader.seek(0)

    response_headers["Content-Type"] = _detect_content_type(name, reader)
    response_headers["Accept-Ranges"] = "bytes"

    start, length, status = 0, size, 200
    range_header = request.headers.get("range")
    if range_header and _range_applies(request, etag, mod_time):
        try:
            ranges = parse_range(range_header, size)
        except MalformedRangeHeader:
            ranges = []
        except RangeNotSatisfiable as e:
            logger.debug(f"Unsatisfiable range for {name}: {range_header}")
            return finish(Response(
                status_code=416,
                headers={"Content-Range": f"bytes */{e.max_size}"},
            ))
        if len(ranges) == 1:
            start, length = ranges[0]
            status = 206
            response_headers["Content-Range"] = f"bytes {start}-{start + length - 1}/{size}"

    response_headers["Content-Length"] = str(length)

    if request.method == "HEAD":
        return finish(Response(status_code=status, headers=response_headers))

    return StreamingResponse(
        _iter_body(reader, start, length),
        status_code=status,
        headers=response_headers,
        background=BackgroundTask(on_close) if on_close is not None else None,
    )
