"""
필터 단계 (순수 함수, 부수효과 없음)
- 포함/제외 단어
- 작성일 범위
- 조회수/댓글수 임계값 (자동필터: 수집분의 중앙값)
"""
from statistics import median_high

from scrape.utils import normalize_for_match


def is_allowed_by_words(text, include_words, exclude_words):
    """포함 단어가 있으면 하나 이상 일치해야 하고, 제외 단어는 하나라도 일치하면 탈락"""
    compact = normalize_for_match(text)

    include = [normalize_for_match(word) for word in include_words or [] if normalize_for_match(word)]
    exclude = [normalize_for_match(word) for word in exclude_words or [] if normalize_for_match(word)]

    if include and not any(word in compact for word in include):
        return False
    if exclude and any(word in compact for word in exclude):
        return False
    return True


def is_in_date_range(published_at, from_date=None, to_date=None):
    """작성일을 모르면 항상 통과. 범위는 양 끝 포함 (날짜 단위)"""
    if published_at is None:
        return True
    day = published_at.date() if hasattr(published_at, 'date') else published_at
    if from_date and day < from_date:
        return False
    if to_date and day > to_date:
        return False
    return True


def admit_post(title, content_text, published_at, include_words=None, exclude_words=None,
               from_date=None, to_date=None):
    return (
        is_allowed_by_words(f"{title}\n{content_text}", include_words, exclude_words)
        and is_in_date_range(published_at, from_date, to_date)
    )


def resolve_thresholds(posts, use_auto_filter, min_view=None, min_comment=None):
    """실제 적용할 (최소조회수, 최소댓글수). 명시값이 없을 때만 자동필터 중앙값을 쓴다"""
    if use_auto_filter:
        if min_view is None:
            min_view = median_high([p.view_count for p in posts]) if posts else 0
        if min_comment is None:
            min_comment = median_high([p.comment_count for p in posts]) if posts else 0
    return min_view, min_comment


def apply_thresholds(posts, use_auto_filter, min_view=None, min_comment=None):
    if not use_auto_filter and min_view is None and min_comment is None:
        return list(posts)

    min_view, min_comment = resolve_thresholds(posts, use_auto_filter, min_view, min_comment)
    return [
        p for p in posts
        if (min_view is None or p.view_count >= min_view)
        and (min_comment is None or p.comment_count >= min_comment)
    ]
