"""
test_hash_cache.py - HashCache 테스트

DoD:
- 수정 시각이 같을 때만 엔트리 재사용
- 동시 get/put 안전
"""

import threading

from servekit.core.hash_cache import CacheEntry, HashCache


class TestCacheEntry:
    """CacheEntry 테스트."""

    def test_valid_for_same_mod_time(self):
        entry = CacheEntry(mod_time_ns=100, tag='"a"')

        assert entry.is_valid_for(100)
        assert not entry.is_valid_for(101)


class TestHashCache:
    """HashCache 테스트."""

    def test_get_missing(self):
        assert HashCache().get("nope") is None

    def test_put_then_get(self):
        cache = HashCache()
        entry = CacheEntry(mod_time_ns=1, tag='"x"')

        cache.put("a.txt", entry)

        assert cache.get("a.txt") == entry
        assert len(cache) == 1

    def test_put_overwrites(self):
        cache = HashCache()
        cache.put("a.txt", CacheEntry(mod_time_ns=1, tag='"old"'))
        cache.put("a.txt", CacheEntry(mod_time_ns=2, tag='"new"'))

        assert cache.get("a.txt").tag == '"new"'
        assert len(cache) == 1

    def test_concurrent_access(self):
        cache = HashCache()
        errors: list[Exception] = []

        def worker(i: int) -> None:
            try:
                for j in range(200):
                    name = f"file-{j % 10}"
                    cache.put(name, CacheEntry(mod_time_ns=i, tag=f'"{i}"'))
                    entry = cache.get(name)
                    assert entry is not None
            except Exception as e:  # 테스트에서 수집 후 검증
                errors.append(e)

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(16)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert len(cache) == 10
