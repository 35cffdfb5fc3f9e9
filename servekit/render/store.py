"""
TemplateStore: 현재 TemplateSet 스냅샷 관리 + live reload.

동시성 규칙:
- render: 진입 시 스냅샷 참조를 한 번만 읽고 (락은 읽는 순간만)
  그 불변 스냅샷으로 실행 → 동시 render끼리 서로 막지 않음
- reload_file: watcher 하나만 호출 (직렬)
  - base(실행에 쓰이지 않는 원본 소스)의 복사본에서 새 그룹 컴파일
  - 성공 시에만 스냅샷 교체 (락은 교체 순간만)
  - 실패 시 현재 스냅샷 유지, 에러는 호출자에게
"""

import io
import logging
import os
import threading
from pathlib import Path
from typing import Any, TextIO

from servekit.render.naming import flavor_for
from servekit.render.template_set import FuncMap, TemplateSet, read_template_source

logger = logging.getLogger(__name__)


class TemplateStore:
    """
    교체 가능한 템플릿 스냅샷 보관소.

    Usage:
        store = TemplateStore.from_directory("templates")
        store.render(sink, "page.html", {"title": "Hello"})
    """

    def __init__(self, templates: TemplateSet, directory: Path | None = None) -> None:
        """
        Args:
            templates: 초기 스냅샷
            directory: 템플릿 디렉터리 (watcher 대상, 없으면 None)
        """
        self.directory = directory
        self._lock = threading.Lock()
        self._current = templates

    @classmethod
    def from_directory(
        cls,
        directory: str | Path,
        functions: FuncMap | None = None,
    ) -> "TemplateStore":
        """
        디렉터리에서 초기 스냅샷 컴파일.

        Raises:
            TemplateCompileError: 초기 세트 구성 실패 (시작 중단)
        """
        directory = Path(directory)
        templates = TemplateSet.from_directory(directory, functions)
        logger.info(f"Loaded {len(templates.names())} templates from {directory}")
        return cls(templates, directory)

    @property
    def snapshot(self) -> TemplateSet:
        with self._lock:
            return self._current

    def render(self, sink: TextIO, name: str, data: Any = None) -> None:
        """
        현재 스냅샷으로 템플릿 실행.

        Raises:
            TemplateExecuteError
        """
        self.snapshot.execute(sink, name, data)

    def render_to_string(self, name: str, data: Any = None) -> str:
        buffer = io.StringIO()
        self.render(buffer, name, data)
        return buffer.getvalue()

    def reload_file(self, path: str | Path) -> None:
        """
        파일 하나를 다시 파싱해 해당 flavor 스냅샷 교체.

        watcher 전용: 동시에 두 번 호출하지 않는다.

        Raises:
            TemplateCompileError: 읽기/파싱 실패 (현재 스냅샷 유지)
        """
        name = os.path.basename(path)
        source = read_template_source(path)

        # 교체는 이 메서드에서만 일어나므로 읽은 뒤 교체 사이에 다른 writer는 없다
        current = self.snapshot
        group = current.group(flavor_for(name)).with_source(name, source)
        updated = current.replace(group)

        with self._lock:
            self._current = updated
        logger.info(f"Updated template file: {path}")
