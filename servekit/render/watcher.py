"""
DirectoryWatcher: 템플릿 디렉터리 변경 감시 → TemplateStore.reload_file.

규칙:
- 백그라운드 task 하나, 이벤트를 하나씩 직렬 처리
- 수정(modified) 이벤트만 처리, 추가/삭제는 무시 (새 파일은 재시작 필요)
- 재로드 실패: 로그만 남기고 이전 스냅샷 유지
- 감시 생성 실패: 로그만 남기고 live reload 없이 계속 서비스
- 수명: 애플리케이션 lifespan이 start()/stop()으로 관리
"""

import asyncio
import logging
from pathlib import Path
from typing import Any

from watchfiles import Change, awatch

from servekit.domain.errors import ErrorCodes, TemplateCompileError, WatchSetupError
from servekit.render.store import TemplateStore

logger = logging.getLogger(__name__)


class DirectoryWatcher:
    """
    템플릿 디렉터리 watcher.

    Usage:
        watcher = DirectoryWatcher(store)
        watcher.start()
        ...
        await watcher.stop()
    """

    def __init__(
        self,
        store: TemplateStore,
        directory: str | Path | None = None,
        **watch_options: Any,
    ) -> None:
        """
        Args:
            store: 재로드 대상 TemplateStore
            directory: 감시 디렉터리 (기본: store.directory)
            **watch_options: watchfiles.awatch 추가 옵션 (debounce, force_polling 등)
        """
        directory = directory if directory is not None else store.directory
        if directory is None:
            raise ValueError("directory is required when the store has none")

        self.store = store
        self.directory = Path(directory)
        self.watch_options = watch_options
        self.setup_error: WatchSetupError | None = None
        self.reload_count = 0
        self._stop_event = asyncio.Event()
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """실행 중인 event loop에서 백그라운드 task 시작."""
        if self.running:
            logger.warning("Template watcher already running; ignoring duplicate start")
            return
        self._stop_event.clear()
        self._task = asyncio.create_task(self.run(), name="template-watcher")

    async def stop(self) -> None:
        """감시 중단 + task 종료 대기 (구독 해제)."""
        self._stop_event.set()
        if self._task is not None:
            await self._task
            self._task = None

    async def run(self) -> None:
        if not self.directory.is_dir():
            self._setup_failed(f"not a directory: {self.directory}")
            return

        logger.info(f"Watching template directory: {self.directory}")
        try:
            async for changes in awatch(
                self.directory,
                stop_event=self._stop_event,
                recursive=False,
                **self.watch_options,
            ):
                for change, path in sorted(changes, key=lambda c: c[1]):
                    if change != Change.modified:
                        continue
                    if not self._is_template_file(path):
                        continue
                    await self._reload(path)
        except OSError as e:
            self._setup_failed(str(e))
            return

        logger.info(f"Stopped watching template directory: {self.directory}")

    def _is_template_file(self, path: str) -> bool:
        p = Path(path)
        return not p.name.startswith(".") and p.is_file()

    async def _reload(self, path: str) -> None:
        try:
            await asyncio.to_thread(self.store.reload_file, path)
        except TemplateCompileError as e:
            logger.warning(f"Failed to reload template file ({path}): {e}")
            return
        self.reload_count += 1

    def _setup_failed(self, reason: str) -> None:
        self.setup_error = WatchSetupError(
            ErrorCodes.WATCH_SETUP_FAILED,
            f"Failed to watch template directory: {reason}",
            directory=str(self.directory),
        )
        logger.warning(f"Template live reload disabled: {self.setup_error}")
