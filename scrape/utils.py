"""
공통 유틸리티 함수들
- 숫자/날짜 관대한 파싱
- 본문 해시
- 텍스트 정규화 / 잘라내기
- Redis 연결
"""
import hashlib
import re
from datetime import datetime
from zoneinfo import ZoneInfo

import redis as redis_client


def parse_int_safe(value):
    """'1,234' 같은 값을 정수로 변환 (음수는 0, 숫자가 아니거나 nan/inf면 0)"""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return max(0, value)
    text = value if isinstance(value, float) else str(value).replace(',', '').strip()
    try:
        return max(0, int(float(text)))
    except (ValueError, OverflowError):
        return 0


def parse_count_text(text):
    """'조회 1,234' 처럼 라벨 뒤에 붙은 숫자를 정수로 변환"""
    digits = re.sub(r'[^\d]', '', text or '')
    return int(digits) if digits else 0


def content_hash(text):
    """추출 본문의 SHA-256 hex digest (전역 중복 제거 키)"""
    return hashlib.sha256((text or '').encode('utf-8')).hexdigest()


def normalize_for_match(text):
    """공백 제거 + casefold (포함/제외 단어 매칭용)"""
    return re.sub(r'\s+', '', text or '').casefold()


def progress_cell_key(cafe_id, keyword):
    """진행상황 matrix 키: 'cafeId::keyword'"""
    cafe = str(cafe_id or '').strip()
    word = re.sub(r'\s+', ' ', str(keyword or '')).strip().lower()
    return f"{cafe}::{word}"


_NAVER_DATE_PATTERN = re.compile(
    r'(\d{4})\s*[.\-/]\s*(\d{1,2})\s*[.\-/]\s*(\d{1,2})\.?(?:\s+(\d{1,2}):(\d{2})(?::(\d{2}))?)?'
)


def to_local_naive(value, tz_name='Asia/Seoul'):
    """aware datetime을 지정 타임존의 naive datetime으로 변환 (USE_TZ=False 저장용)"""
    if value.tzinfo is None:
        return value
    return value.astimezone(ZoneInfo(tz_name)).replace(tzinfo=None)


def to_datetime_safe(value, tz_name='Asia/Seoul'):
    """ISO-8601 또는 '2024.05.01. 13:22' 형태를 datetime으로 변환

    파싱 실패 시 None (오류 아님)
    """
    if not value:
        return None
    text = str(value).strip()
    if not text:
        return None

    iso_text = text[:-1] + '+00:00' if text.endswith('Z') else text
    try:
        return to_local_naive(datetime.fromisoformat(iso_text), tz_name)
    except ValueError:
        pass

    match = _NAVER_DATE_PATTERN.search(text)
    if not match:
        return None
    year, month, day, hour, minute, second = match.groups()
    try:
        return datetime(
            int(year), int(month), int(day),
            int(hour or 0), int(minute or 0), int(second or 0),
        )
    except ValueError:
        return None


def truncate_text(text, limit):
    """limit 초과 시 정확히 limit 길이로 자르고 원본 글자수 표시를 붙인다"""
    text = text or ''
    length = len(text)
    if length <= limit:
        return text
    marker = f"\n...(truncated, original {length} chars)"
    return text[:limit - len(marker)] + marker


# ============================================================
# Redis (큐 스케줄러 lease)
# ============================================================

_redis_pool = None


def get_redis_connection():
    global _redis_pool
    if _redis_pool is None:
        from django.conf import settings
        _redis_pool = redis_client.ConnectionPool.from_url(settings.CELERY_BROKER_URL)
    return redis_client.Redis(connection_pool=_redis_pool)
