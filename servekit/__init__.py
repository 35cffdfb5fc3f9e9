"""
servekit: 템플릿 렌더링 (live reload) + ETag 캐시 정적 파일 전송.

레이어:
- domain: 에러, 상수
- core: 파일 시스템, ETag 캐시, FileStore, 조건부 전송
- render: TemplateSet, TemplateStore, DirectoryWatcher
- app: FastAPI 앱, 라우트, 응답 헬퍼
"""

__version__ = "0.1.0"
