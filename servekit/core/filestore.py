"""
FileStore: 임의의 파일 시스템에서 파일 전송 + ETag 캐시.

규칙:
- ETag는 파일 내용 해시 (HashCache에 파일명 단위로 캐시)
- 캐시 엔트리는 수정 시각이 바뀌면 재계산
- 디렉터리는 전송하지 않음 (404)
- 재시도 없음: open 이후 I/O 실패는 즉시 500

주의: filename은 정제하지 않고 파일 시스템에 그대로 전달한다.
DirectoryFS/ZipFS는 valid_path 규칙을 벗어나는 이름을 "없음"으로 처리한다.
"""

import io
import logging
from pathlib import Path
from typing import BinaryIO

from fastapi import Request
from fastapi.responses import Response

from servekit.core.conditional import serve_content
from servekit.core.filesystem import DirectoryFS, FileInfo, FileSystem, OpenFile
from servekit.core.hash_cache import CacheEntry, HashCache
from servekit.core.hashing import compute_stream_hash, format_etag
from servekit.domain.constants import DEFAULT_ETAG_ALGORITHM
from servekit.domain.errors import internal_error, not_found

logger = logging.getLogger(__name__)

# open 시 "없음"으로 취급하는 에러
_NOT_FOUND_ERRORS = (FileNotFoundError, NotADirectoryError, IsADirectoryError)


class FileStore:
    """
    파일 전송기.

    Usage:
        store = FileStore.from_directory("static")

        @app.get("/static/{path:path}")
        def static(request: Request, path: str) -> Response:
            return store.send_file(request, path)
    """

    def __init__(
        self,
        fs: FileSystem,
        algorithm: str = DEFAULT_ETAG_ALGORITHM,
        cache: HashCache | None = None,
    ) -> None:
        """
        Args:
            fs: 파일 시스템 (읽기 전용으로 사용)
            algorithm: ETag 해시 알고리즘 (hashlib 이름)
            cache: ETag 캐시 (기본: 새 캐시)
        """
        self.fs = fs
        self.algorithm = algorithm
        self.cache = cache if cache is not None else HashCache()

    @classmethod
    def from_directory(
        cls,
        dirname: str | Path,
        algorithm: str = DEFAULT_ETAG_ALGORITHM,
    ) -> "FileStore":
        return cls(DirectoryFS(dirname), algorithm=algorithm)

    def send_file(self, request: Request, filename: str) -> Response:
        """
        파일 전송.

        Args:
            request: 요청 (조건부/범위 헤더 평가용)
            filename: 파일 시스템 기준 이름

        Returns:
            serve_content 응답 (ETag 헤더 포함)

        Raises:
            HTTPError: 404 (없음/디렉터리), 500 (I/O 실패)
        """
        try:
            handle = self.fs.open(filename)
        except _NOT_FOUND_ERRORS:
            raise not_found() from None
        except OSError as e:
            raise internal_error(e) from e

        try:
            info = handle.stat()
            if info.is_dir:
                raise not_found()

            reader = self._seekable_reader(handle)
            tag = self._etag(filename, info, reader)

            # ETag 비교는 serve_content가 처리
            return serve_content(
                request,
                info.name,
                info.mod_time,
                reader,
                headers={"ETag": tag},
                on_close=handle.close,
            )
        except OSError as e:
            handle.close()
            raise internal_error(e) from e
        except BaseException:
            handle.close()
            raise

    def _seekable_reader(self, handle: OpenFile) -> BinaryIO:
        if handle.seekable():
            return handle.stream
        # 느린 경로: seek을 위해 전체를 메모리로 읽는다
        return io.BytesIO(handle.read())

    def _etag(self, filename: str, info: FileInfo, reader: BinaryIO) -> str:
        entry = self.cache.get(filename)
        if entry is not None and entry.is_valid_for(info.mod_time_ns):
            return entry.tag

        tag = self._compute_etag(reader)
        self.cache.put(filename, CacheEntry(mod_time_ns=info.mod_time_ns, tag=tag))
        logger.debug(f"Computed ETag for {filename}: {tag}")
        return tag

    def _compute_etag(self, reader: BinaryIO) -> str:
        digest = compute_stream_hash(reader, self.algorithm)
        reader.seek(0)
        return format_etag(digest)
