"""
Domain Constants: servekit 전역 상수.

템플릿 flavor 규칙, ETag 해시, 정적 파일 전송 관련 값들.
"""

# =============================================================================
# Template Flavors (템플릿 escaping 규칙)
# =============================================================================
# 파일명의 두 번째 확장자(ext2)로 flavor 결정:
# - mail.text.txt → ext2 == ".text" → text flavor (escaping 없음)
# - page.html     → ext2 == ""      → html flavor (HTML escaping)

TEXT_FLAVOR_MARKER = ".text"

FLAVOR_TEXT = "text"
FLAVOR_HTML = "html"

# =============================================================================
# Static Files (정적 파일 전송)
# =============================================================================

# ETag 계산용 해시 알고리즘 (hashlib.new 이름)
DEFAULT_ETAG_ALGORITHM = "sha256"

# 해시/전송 시 읽기 단위
HASH_CHUNK_SIZE = 8192
SEND_CHUNK_SIZE = 64 * 1024

# Content-Type 추정 실패 시 sniffing에 사용하는 앞부분 크기
SNIFF_LENGTH = 512

# =============================================================================
# Response Content Types
# =============================================================================

CONTENT_TYPE_HTML = "text/html; charset=UTF-8"
CONTENT_TYPE_JSON = "application/json; charset=UTF-8"
