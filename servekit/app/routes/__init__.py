"""
FastAPI Routes.

페이지 라우트 (템플릿 렌더) + 정적 파일 라우트 (ETag)
"""

from . import pages, static

__all__ = ["pages", "static"]
