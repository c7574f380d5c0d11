"""
후보 게시글 검색 단계
카페 1곳 + 키워드 1개에 대해 최신순 검색을 페이지 단위로 최대 4페이지까지 조회한다.
"""
import logging
import re
from collections import namedtuple

from scrape.package import naver_search
from scrape.utils import parse_int_safe


logger = logging.getLogger(__name__)

Candidate = namedtuple(
    'Candidate',
    ['article_id', 'subject', 'view_count', 'comment_count', 'like_count', 'board_name'],
)

BOARD_NAME_FIELDS = ('boardName', 'boardTitle', 'menuName', 'menu', 'menuTitle', 'board')


def _board_name(item):
    for field in BOARD_NAME_FIELDS:
        value = str(item.get(field) or '').strip()
        if value:
            return value
    return ''


def parse_article_row(row):
    """검색 API row 1건을 Candidate로 변환. ARTICLE 타입이 아니거나 ID가 없으면 None"""
    if not isinstance(row, dict) or row.get('type') != 'ARTICLE':
        return None
    item = row.get('item') or {}
    article_id = str(item.get('articleId') or '').strip()
    if not article_id.isdigit():
        return None

    like_value = item.get('likeItCount')
    if like_value is None:
        like_value = item.get('likeCount')

    return Candidate(
        article_id=int(article_id),
        subject=re.sub(r'<[^>]*>', '', str(item.get('subject') or '')).strip(),
        view_count=parse_int_safe(item.get('readCount')),
        comment_count=parse_int_safe(item.get('commentCount')),
        like_count=parse_int_safe(like_value),
        board_name=_board_name(item),
    )


def search_candidates(cafe_id, keyword, reporter=None, seen_ids=None, cookies=None,
                      page_size=50, max_pages=4, timeout=15):
    """키워드 검색 후보 목록 반환 (최대 max_pages * page_size 건)

    - 빈 페이지 또는 page_size 미만 페이지가 오면 마지막 페이지로 보고 중단
    - seen_ids에 있는 articleId는 건너뛴다 (같은 작업 내 중복 제거, 호출 측과 공유)

    Raises:
        SearchRequestError: 검색 API 호출 실패
    """
    seen_ids = seen_ids if seen_ids is not None else set()
    candidates = []
    fetched_rows = 0
    total_results = 0

    for page in range(1, max_pages + 1):
        rows, total_count = naver_search.get_article_list(
            cafe_id, keyword, page, page_size, cookies=cookies, timeout=timeout
        )
        if not rows:
            break

        fetched_rows += len(rows)
        total_results = parse_int_safe(total_count) if total_count is not None else fetched_rows

        for row in rows:
            candidate = parse_article_row(row)
            if candidate is None or candidate.article_id in seen_ids:
                continue
            seen_ids.add(candidate.article_id)
            candidates.append(candidate)

        if reporter is not None:
            reporter.update_cell(
                cafe_id, keyword,
                pagesScanned=page,
                pagesTarget=max_pages,
                fetchedRows=fetched_rows,
                totalResults=total_results,
            )

        if len(rows) < page_size:
            break

    logger.info(f"[검색] cafe={cafe_id} keyword={keyword} 후보={len(candidates)} 조회행={fetched_rows}")
    return candidates
