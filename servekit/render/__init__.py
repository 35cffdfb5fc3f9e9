"""
Render layer: 템플릿 렌더링 + live reload.

역할:
- 불변 템플릿 스냅샷 (template_set.py)
- 스냅샷 교체/렌더 진입점 (store.py)
- 디렉터리 감시 (watcher.py)
"""

from .naming import ext2, flavor_for
from .store import TemplateStore
from .template_set import TemplateGroup, TemplateSet
from .watcher import DirectoryWatcher

__all__ = [
    # naming
    "ext2",
    "flavor_for",
    # template_set
    "TemplateSet",
    "TemplateGroup",
    # store
    "TemplateStore",
    # watcher
    "DirectoryWatcher",
]
