"""
App layer: HTTP 서버 (FastAPI).

역할:
- 설정 로드, 로깅 설정, lifespan (watcher 시작/중단)
- 페이지 라우트 (템플릿), 정적 파일 라우트 (ETag)
- 응답 헬퍼 (blob, JSON, redirect, template)
- ⚠️ 렌더/전송 로직 없음 (render, core에 위임)

주의: 폴더 구분
- servekit/render/ → 코드 (템플릿 스냅샷, watcher)
- templates/ (루트) → 템플릿 데이터 (live reload 대상)
- static/ (루트) → 정적 파일
"""
