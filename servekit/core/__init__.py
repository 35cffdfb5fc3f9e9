"""
Core layer: 정적 파일 전송 핵심 모듈.

역할:
- 파일 시스템 추상화 (DirectoryFS, ZipFS)
- 내용 기반 ETag 계산 + 수정 시각 기준 캐시
- 조건부/범위 요청 처리 (serve_content)
"""

from .conditional import serve_content
from .filestore import FileStore
from .filesystem import DirectoryFS, FileInfo, FileSystem, OpenFile, ZipFS, valid_path
from .hash_cache import CacheEntry, HashCache
from .hashing import compute_stream_hash, format_etag

__all__ = [
    # filestore
    "FileStore",
    # filesystem
    "FileSystem",
    "FileInfo",
    "OpenFile",
    "DirectoryFS",
    "ZipFS",
    "valid_path",
    # hash_cache
    "HashCache",
    "CacheEntry",
    # hashing
    "compute_stream_hash",
    "format_etag",
    # conditional
    "serve_content",
]
