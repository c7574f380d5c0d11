"""
구글 시트 웹훅 전송
작업 1건당 POST 1회, {"postRows": [...]} 형태
"""
import requests

from scrape.exceptions import SheetSyncError
from scrape.utils import truncate_text


BODY_TEXT_LIMIT = 45000
COMMENTS_TEXT_LIMIT = 20000


def build_comments_text(comments):
    lines = []
    for comment in comments:
        author = (comment.get('author_name') or '').strip()
        body = (comment.get('body') or '').strip()
        lines.append(f"{author}: {body}" if author else body)
    return '\n'.join(lines)


def build_post_row(job_id, post, comments):
    """시트 1행 생성 (긴 텍스트는 잘라서 보냄, DB에는 원문 그대로 남음)

    Args:
        post: ScrapePost 필드를 가진 dict
        comments: author_name/body 키를 가진 dict 목록
    """
    body_text = post.get('content_text') or ''
    comments_text = build_comments_text(comments)
    content_text = f"{post.get('title') or ''}\n\n{body_text}"
    if comments_text:
        content_text = f"{content_text}\n\n[댓글]\n{comments_text}"

    published_at = post.get('published_at')
    cafe_id = post.get('cafe_id') or ''
    return {
        'jobId': str(job_id),
        'sourceUrl': post.get('source_url') or '',
        'cafeId': cafe_id,
        'cafeName': post.get('cafe_name') or '',
        'cafeUrl': f"https://cafe.naver.com/{cafe_id}",
        'title': post.get('title') or '',
        'authorName': post.get('author_name') or '',
        'publishedAt': published_at.isoformat() if published_at else '',
        'viewCount': post.get('view_count') or 0,
        'likeCount': post.get('like_count') or 0,
        'commentCount': post.get('comment_count') or 0,
        'bodyText': truncate_text(body_text, BODY_TEXT_LIMIT),
        'commentsText': truncate_text(comments_text, COMMENTS_TEXT_LIMIT),
        'contentText': truncate_text(content_text, BODY_TEXT_LIMIT),
    }


def send_rows_to_sheet(endpoint, post_rows, timeout=60):
    """웹훅으로 전송. endpoint가 없으면 전송하지 않고 0 반환

    Returns:
        동기화된 행 수
    """
    if not endpoint or not post_rows:
        return 0

    response = requests.post(
        endpoint,
        json={'postRows': post_rows},
        headers={'Content-Type': 'application/json'},
        timeout=timeout,
    )
    if not response.ok:
        raise SheetSyncError(f"Google Sheet sync failed: {response.status_code} {response.text[:500]}")
    return len(post_rows)
