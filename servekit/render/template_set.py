"""
TemplateSet: 디렉터리 파일로부터 컴파일된 불변 템플릿 스냅샷.

규칙:
- flavor별로 그룹 분리 (ext2 == ".text" → text, 나머지 → html)
  - text: escaping 없음
  - html: HTML autoescape
- 같은 flavor 안에서는 이름 공간 공유 (include/extends 가능)
- 템플릿 이름 = 파일 base name, 중복 시 컴파일 실패
- 생성 후 변경 금지: 갱신은 새 TemplateSet 생성으로만
- 빈 그룹 허용 (실행 시 TEMPLATE_NOT_FOUND)
"""

import os
from collections.abc import Callable, Iterable, Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any, TextIO

from jinja2 import DictLoader, Environment, StrictUndefined, Template, TemplateSyntaxError
from jinja2 import TemplateError as JinjaTemplateError

from servekit.domain.constants import FLAVOR_HTML, FLAVOR_TEXT
from servekit.domain.errors import ErrorCodes, TemplateCompileError, TemplateExecuteError
from servekit.render.naming import flavor_for

FuncMap = Mapping[str, Callable[..., Any]]


# =============================================================================
# Compilation
# =============================================================================

def _make_environment(flavor: str, sources: Mapping[str, str], functions: FuncMap) -> Environment:
    env = Environment(
        loader=DictLoader(dict(sources)),
        autoescape=flavor == FLAVOR_HTML,
        undefined=StrictUndefined,
        keep_trailing_newline=True,
        auto_reload=False,
        cache_size=-1,
    )
    env.globals.update(functions)
    return env


def read_template_source(path: str | Path) -> str:
    """
    템플릿 소스 읽기.

    Raises:
        TemplateCompileError: TEMPLATE_READ_FAILED
    """
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise TemplateCompileError(
            ErrorCodes.TEMPLATE_READ_FAILED,
            f"Failed to read template file: {e}",
            path=str(path),
        ) from e


class TemplateGroup:
    """
    한 flavor의 컴파일된 템플릿 묶음.

    sources는 실행에 쓰이지 않는 base(원본) 매핑이다.
    재파싱은 항상 sources의 복사본에서 시작한다 (with_source).
    """

    def __init__(
        self,
        flavor: str,
        sources: Mapping[str, str] | None = None,
        functions: FuncMap | None = None,
    ) -> None:
        self.flavor = flavor
        self.sources: Mapping[str, str] = MappingProxyType(dict(sources or {}))
        self.functions: FuncMap = MappingProxyType(dict(functions or {}))
        self._env = _make_environment(flavor, self.sources, self.functions)
        self.templates: Mapping[str, Template] = MappingProxyType(self._compile())

    def _compile(self) -> dict[str, Template]:
        compiled = {}
        for name in sorted(self.sources):
            try:
                compiled[name] = self._env.get_template(name)
            except TemplateSyntaxError as e:
                raise TemplateCompileError(
                    ErrorCodes.TEMPLATE_SYNTAX,
                    e.message or "invalid template syntax",
                    name=name,
                    lineno=e.lineno,
                ) from e
        return compiled

    def with_source(self, name: str, source: str) -> "TemplateGroup":
        """base 복사본에 파일 하나를 반영한 새 그룹."""
        sources = dict(self.sources)
        sources[name] = source
        return TemplateGroup(self.flavor, sources, self.functions)

    def __contains__(self, name: object) -> bool:
        return name in self.templates

    def __len__(self) -> int:
        return len(self.templates)


# =============================================================================
# TemplateSet
# =============================================================================

def _context(data: Any) -> dict[str, Any]:
    # 데이터는 항상 "data"로, mapping이면 키도 최상위 변수로 노출
    context = dict(data) if isinstance(data, Mapping) else {}
    context.setdefault("data", data)
    return context


class TemplateSet:
    """
    불변 템플릿 스냅샷 (text 그룹 + html 그룹).

    Usage:
        templates = TemplateSet.from_directory("templates")
        templates.execute(sys.stdout, "page.html", {"title": "Hello"})
    """

    def __init__(self, text: TemplateGroup, html: TemplateGroup) -> None:
        self._groups = MappingProxyType({FLAVOR_TEXT: text, FLAVOR_HTML: html})

    @classmethod
    def empty(cls, functions: FuncMap | None = None) -> "TemplateSet":
        return cls(
            TemplateGroup(FLAVOR_TEXT, functions=functions),
            TemplateGroup(FLAVOR_HTML, functions=functions),
        )

    @classmethod
    def from_sources(
        cls,
        sources: Mapping[str, str],
        functions: FuncMap | None = None,
    ) -> "TemplateSet":
        """
        {이름: 소스} 매핑에서 생성.

        Raises:
            TemplateCompileError: TEMPLATE_SYNTAX
        """
        partitioned: dict[str, dict[str, str]] = {FLAVOR_TEXT: {}, FLAVOR_HTML: {}}
        for name, source in sources.items():
            partitioned[flavor_for(name)][name] = source

        return cls(
            TemplateGroup(FLAVOR_TEXT, partitioned[FLAVOR_TEXT], functions),
            TemplateGroup(FLAVOR_HTML, partitioned[FLAVOR_HTML], functions),
        )

    @classmethod
    def from_files(
        cls,
        paths: Iterable[str | Path],
        functions: FuncMap | None = None,
    ) -> "TemplateSet":
        """
        파일 목록에서 생성. 템플릿 이름은 파일 base name.

        Raises:
            TemplateCompileError: TEMPLATE_READ_FAILED, TEMPLATE_NAME_CONFLICT, TEMPLATE_SYNTAX
        """
        sources: dict[str, str] = {}
        origins: dict[str, str] = {}
        for path in paths:
            name = os.path.basename(path)
            if name in sources:
                raise TemplateCompileError(
                    ErrorCodes.TEMPLATE_NAME_CONFLICT,
                    f"Template '{name}' is defined more than once",
                    name=name,
                    paths=[origins[name], str(path)],
                )
            sources[name] = read_template_source(path)
            origins[name] = str(path)

        return cls.from_sources(sources, functions)

    @classmethod
    def from_directory(
        cls,
        directory: str | Path,
        functions: FuncMap | None = None,
    ) -> "TemplateSet":
        """
        디렉터리의 (숨김이 아닌) 파일 전체에서 생성. 하위 디렉터리는 제외.

        Raises:
            TemplateCompileError
        """
        directory = Path(directory)
        try:
            entries = sorted(directory.iterdir())
        except OSError as e:
            raise TemplateCompileError(
                ErrorCodes.TEMPLATE_READ_FAILED,
                f"Failed to list template directory: {e}",
                path=str(directory),
            ) from e

        paths = [p for p in entries if p.is_file() and not p.name.startswith(".")]
        return cls.from_files(paths, functions)

    # =========================================================================
    # Read
    # =========================================================================

    def group(self, flavor: str) -> TemplateGroup:
        return self._groups[flavor]

    def replace(self, group: TemplateGroup) -> "TemplateSet":
        """group의 flavor만 교체한 새 스냅샷."""
        groups = dict(self._groups)
        groups[group.flavor] = group
        return TemplateSet(groups[FLAVOR_TEXT], groups[FLAVOR_HTML])

    def names(self) -> list[str]:
        return sorted(name for group in self._groups.values() for name in group.templates)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name in self._groups[flavor_for(name)]

    # =========================================================================
    # Execute
    # =========================================================================

    def execute(self, sink: TextIO, name: str, data: Any = None) -> None:
        """
        이름으로 템플릿 실행 → sink에 스트리밍 출력.

        Args:
            sink: write(str)를 가진 출력 대상
            name: 템플릿 이름 (ext2로 flavor 결정)
            data: 템플릿 데이터

        Raises:
            TemplateExecuteError: TEMPLATE_NOT_FOUND, RENDER_FAILED
                (partial=True이면 일부 출력이 이미 쓰였음)
            OSError: sink 쓰기 실패
        """
        group = self._groups[flavor_for(name)]
        template = group.templates.get(name)
        if template is None:
            raise TemplateExecuteError(
                ErrorCodes.TEMPLATE_NOT_FOUND,
                f"Template '{name}' not found",
                name=name,
                flavor=group.flavor,
            )

        written = 0
        try:
            for chunk in template.generate(_context(data)):
                sink.write(chunk)
                written += len(chunk)
        except Exception as e:
            # sink 쓰기 실패는 그대로 전달 (jinja2 TemplateNotFound도 OSError 계열이므로 구분)
            if isinstance(e, OSError) and not isinstance(e, JinjaTemplateError):
                raise
            raise TemplateExecuteError(
                ErrorCodes.RENDER_FAILED,
                f"Failed to execute template: {e}",
                name=name,
                partial=written > 0,
            ) from e
