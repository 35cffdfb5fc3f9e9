"""템플릿 파일명 규칙: 두 번째 확장자(ext2)로 flavor 결정."""

import os

from servekit.domain.constants import FLAVOR_HTML, FLAVOR_TEXT, TEXT_FLAVOR_MARKER


def ext2(path: str) -> str:
    """
    마지막 경로 요소의 두 번째 확장자.

    디렉터리 요소의 점은 세지 않는다.

    Examples:
        ext2("filename.a") → ""
        ext2("filename.a.b") → ".a"
        ext2("filename.a.b.c") → ".b"
        ext2("/dir.a/file.b") → ""
    """
    base = os.path.basename(path)
    last = base.rfind(".")
    if last == -1:
        return ""
    stem = base[:last]
    prev = stem.rfind(".")
    if prev == -1:
        return ""
    return stem[prev:]


def flavor_for(name: str) -> str:
    """이름 → FLAVOR_TEXT 또는 FLAVOR_HTML."""
    if ext2(name) == TEXT_FLAVOR_MARKER:
        return FLAVOR_TEXT
    return FLAVOR_HTML
