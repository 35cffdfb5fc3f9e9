"""
해시 계산: 파일 내용 기반 ETag

규칙:
- 내용 기반: 동일 바이트 → 동일 태그
- 암호학적 해시 (기본 SHA-256)
- ETag 값은 큰따옴표로 감싼다
  (https://developer.mozilla.org/en-US/docs/Web/HTTP/Headers/ETag)
"""

import hashlib
from typing import BinaryIO

from servekit.domain.constants import DEFAULT_ETAG_ALGORITHM, HASH_CHUNK_SIZE


def compute_stream_hash(stream: BinaryIO, algorithm: str = DEFAULT_ETAG_ALGORITHM) -> str:
    """
    스트림 전체를 읽어 해시 계산.

    현재 위치부터 끝까지 읽는다. 위치 복원은 호출자 책임.

    Args:
        stream: 바이너리 스트림
        algorithm: 해시 알고리즘 (기본: sha256)

    Returns:
        hex 해시 문자열
    """
    h = hashlib.new(algorithm)
    for chunk in iter(lambda: stream.read(HASH_CHUNK_SIZE), b""):
        h.update(chunk)
    return h.hexdigest()


def format_etag(digest: str) -> str:
    """hex digest → strong ETag 값."""
    return f'"{digest}"'
