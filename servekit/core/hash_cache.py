"""
ETag 캐시: 파일 식별자 → (수정 시각, ETag)

규칙:
- 엔트리는 저장된 수정 시각 == 현재 수정 시각일 때만 재사용
- 모든 접근은 락으로 직렬화 (get/put 외 직접 접근 금지)
- eviction 없음: 운영자가 관리하는 유한한 파일 집합 전제
"""

import threading
from dataclasses import dataclass


@dataclass(frozen=True)
class CacheEntry:
    """캐시 엔트리. mod_time_ns는 태그를 계산한 시점의 파일 수정 시각."""
    mod_time_ns: int
    tag: str

    def is_valid_for(self, mod_time_ns: int) -> bool:
        return self.mod_time_ns == mod_time_ns


class HashCache:
    """Thread-safe ETag 캐시."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: dict[str, CacheEntry] = {}

    def get(self, path: str) -> CacheEntry | None:
        with self._lock:
            return self._entries.get(path)

    def put(self, path: str, entry: CacheEntry) -> None:
        with self._lock:
            self._entries[path] = entry

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
