"""
읽기 전용 파일 시스템 추상화.

FileStore는 이 인터페이스만 사용한다:
- open(name) → OpenFile (stream + stat)
- list_dir(name) → FileInfo 목록
- stat(name) → FileInfo

구현:
- DirectoryFS: OS 디렉터리 트리
- ZipFS: zip 아카이브 (내장/가상 파일 시스템)

이름 규칙 (valid_path):
- 구분자는 "/"
- 선행 "/" 금지, ".", "..", 빈 요소 금지, NUL 문자 금지
- 루트 자체는 "."
"""

import calendar
import errno
import io
import os
import stat as stat_module
import zipfile
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import BinaryIO, Protocol


@dataclass(frozen=True)
class FileInfo:
    """파일 메타데이터."""
    name: str
    size: int
    mod_time_ns: int
    is_dir: bool = False

    @property
    def mod_time(self) -> datetime:
        return datetime.fromtimestamp(self.mod_time_ns / 1_000_000_000, tz=UTC)


class OpenFile:
    """
    열린 파일 핸들.

    stream은 바이너리 스트림이며 seek 가능 여부는 구현에 따라 다르다.
    """

    def __init__(self, stream: BinaryIO, stat: Callable[[], FileInfo]) -> None:
        self.stream = stream
        self._stat = stat

    def stat(self) -> FileInfo:
        return self._stat()

    def read(self, size: int = -1) -> bytes:
        return self.stream.read(size)

    def seekable(self) -> bool:
        return self.stream.seekable()

    def close(self) -> None:
        self.stream.close()

    def __enter__(self) -> "OpenFile":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class FileSystem(Protocol):
    """FileStore가 소비하는 파일 시스템 계약."""

    def open(self, name: str) -> OpenFile: ...

    def list_dir(self, name: str) -> list[FileInfo]: ...

    def stat(self, name: str) -> FileInfo: ...


def valid_path(name: str) -> bool:
    """
    파일 시스템 이름 유효성 검사.

    Examples:
        valid_path("css/style.css") → True
        valid_path("../etc/passwd") → False
        valid_path("/abs") → False
        valid_path("a\\x00b") → False  (NUL 문자)
    """
    if "\x00" in name:
        return False
    if name == ".":
        return True
    return all(elem not in ("", ".", "..") for elem in name.split("/"))


def _not_found(name: str) -> FileNotFoundError:
    return FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), name)


# =============================================================================
# DirectoryFS
# =============================================================================

class DirectoryFS:
    """
    OS 디렉터리 트리.

    경로 순회 방지: resolve()로 symlink를 따라간 실제 경로가
    root 내부가 아니면 "없음"으로 취급.
    """

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def _resolve(self, name: str) -> Path:
        if not valid_path(name):
            raise _not_found(name)

        target = self.root / name
        try:
            resolved = target.resolve(strict=True)
        except ValueError:
            raise _not_found(name) from None
        except RuntimeError as e:
            # Python 3.12 이하: symlink 순환은 RuntimeError
            raise OSError(errno.ELOOP, os.strerror(errno.ELOOP), name) from e
        try:
            resolved.relative_to(self.root.resolve())
        except ValueError:
            raise _not_found(name) from None
        return resolved

    @staticmethod
    def _info(name: str, st: os.stat_result) -> FileInfo:
        return FileInfo(
            name=os.path.basename(name) or ".",
            size=st.st_size,
            mod_time_ns=st.st_mtime_ns,
            is_dir=stat_module.S_ISDIR(st.st_mode),
        )

    def open(self, name: str) -> OpenFile:
        path = self._resolve(name)

        if path.is_dir():
            info = self._info(name, path.stat())
            return OpenFile(io.BytesIO(b""), lambda: info)

        f = open(path, "rb")
        return OpenFile(f, lambda: self._info(name, os.fstat(f.fileno())))

    def list_dir(self, name: str) -> list[FileInfo]:
        path = self._resolve(name)
        entries = [
            self._info(entry.name, entry.stat())
            for entry in os.scandir(path)
        ]
        entries.sort(key=lambda info: info.name)
        return entries

    def stat(self, name: str) -> FileInfo:
        return self._info(name, self._resolve(name).stat())


# =============================================================================
# ZipFS
# =============================================================================

def _zip_mod_time_ns(info: zipfile.ZipInfo) -> int:
    # zip 타임스탬프는 타임존 정보가 없으므로 UTC로 간주
    return calendar.timegm(info.date_time + (0, 0, 0)) * 1_000_000_000


class ZipFS:
    """
    zip 아카이브 기반 읽기 전용 파일 시스템.

    디렉터리 엔트리는 멤버 경로에서 합성한다 (아카이브에 없어도 됨).
    """

    def __init__(self, archive: zipfile.ZipFile | str | Path) -> None:
        if not isinstance(archive, zipfile.ZipFile):
            archive = zipfile.ZipFile(archive)
        self.archive = archive

        self._files: dict[str, zipfile.ZipInfo] = {}
        self._dirs: set[str] = {"."}
        for info in archive.infolist():
            member = info.filename.rstrip("/")
            if info.is_dir():
                self._dirs.add(member)
            else:
                self._files[member] = info
            parts = member.split("/")
            for i in range(1, len(parts)):
                self._dirs.add("/".join(parts[:i]))

    def _dir_info(self, name: str) -> FileInfo:
        return FileInfo(name=name.rsplit("/", 1)[-1], size=0, mod_time_ns=0, is_dir=True)

    def _file_info(self, name: str) -> FileInfo:
        info = self._files[name]
        return FileInfo(
            name=name.rsplit("/", 1)[-1],
            size=info.file_size,
            mod_time_ns=_zip_mod_time_ns(info),
        )

    def open(self, name: str) -> OpenFile:
        if valid_path(name):
            if name in self._files:
                info = self._file_info(name)
                return OpenFile(self.archive.open(self._files[name]), lambda: info)
            if name in self._dirs:
                info = self._dir_info(name)
                return OpenFile(io.BytesIO(b""), lambda: info)
        raise _not_found(name)

    def list_dir(self, name: str) -> list[FileInfo]:
        if not valid_path(name) or name not in self._dirs:
            raise _not_found(name)

        prefix = "" if name == "." else name + "/"
        entries = []
        for member in sorted(self._files.keys() | self._dirs):
            if member == "." or not member.startswith(prefix):
                continue
            if "/" in member[len(prefix):]:
                continue
            entries.append(self.stat(member))
        return entries

    def stat(self, name: str) -> FileInfo:
        if valid_path(name):
            if name in self._files:
                return self._file_info(name)
            if name in self._dirs:
                return self._dir_info(name)
        raise _not_found(name)
