"""
최종 수집분 백업 엑셀 (참고용, 원본은 DB에 있음)
"""
import re
from datetime import datetime
from io import BytesIO

from django.conf import settings
from django.core.files.base import ContentFile
from django.core.files.storage import default_storage
from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE


EXPORT_CONTENT_LIMIT = 5000


def get_excel_columns():
    return [
        'sourceUrl', 'cafeId', 'cafeName', 'keyword', 'title', 'authorName',
        'publishedAt', 'viewCount', 'likeCount', 'commentCount', 'contentText', 'boardName',
    ]


def _clean(value):
    if isinstance(value, str):
        return ILLEGAL_CHARACTERS_RE.sub('', value)
    return value


def _row(post):
    return [_clean(value) for value in [
        post.source_url,
        post.cafe_id,
        post.cafe_name,
        post.keyword,
        post.title,
        post.author_name,
        post.published_at.isoformat() if post.published_at else '',
        post.view_count,
        post.like_count,
        post.comment_count,
        re.sub(r'\s+', ' ', post.content_text)[:EXPORT_CONTENT_LIMIT],
        post.board_name,
    ]]


def export_posts(job_id, posts):
    """엑셀로 저장 후 스토리지 경로 반환"""
    wb = Workbook()
    ws = wb.active
    ws.title = f"job-{job_id}"
    ws.append(get_excel_columns())
    for post in posts:
        ws.append(_row(post))

    excel_buffer = BytesIO()
    wb.save(excel_buffer)

    filename = f"{settings.SCRAPE_EXPORT_DIR}/job-{job_id}-{datetime.now().strftime('%Y%m%d%H%M%S')}.xlsx"
    return default_storage.save(filename, ContentFile(excel_buffer.getvalue()))
