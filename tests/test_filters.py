from collections import namedtuple
from datetime import date, datetime

from scrape.filters import (
    admit_post,
    apply_thresholds,
    is_allowed_by_words,
    is_in_date_range,
    resolve_thresholds,
)


Post = namedtuple('Post', ['view_count', 'comment_count'])


def test_include_words_require_one_match():
    assert is_allowed_by_words('집중력 높이는 법', ['집중 력'], [])
    assert not is_allowed_by_words('수면 관리', ['집중'], [])


def test_exclude_words_reject_any_match():
    assert not is_allowed_by_words('광고 문의 주세요', [], ['광고'])
    assert is_allowed_by_words('후기입니다', [], ['광고'])


def test_word_match_is_case_and_space_insensitive():
    assert is_allowed_by_words('Omega 3 추천', ['OMEGA3'], [])
    assert is_allowed_by_words('아무 내용', [], [])
    assert is_allowed_by_words('아무 내용', ['  '], [])


def test_unknown_published_at_always_passes():
    assert is_in_date_range(None, date(2024, 1, 1), date(2024, 1, 31))


def test_date_range_is_inclusive():
    start, end = date(2024, 5, 1), date(2024, 5, 31)
    assert is_in_date_range(datetime(2024, 5, 1, 0, 0), start, end)
    assert is_in_date_range(datetime(2024, 5, 31, 23, 59), start, end)
    assert not is_in_date_range(datetime(2024, 4, 30, 23, 59), start, end)
    assert not is_in_date_range(datetime(2024, 6, 1), start, end)
    assert is_in_date_range(datetime(2020, 1, 1), None, end)


def test_admit_post_is_pure():
    args = ('제목', '집중 공부 후기', datetime(2024, 5, 3), ['집중'], ['광고'], date(2024, 5, 1), date(2024, 5, 31))
    first = admit_post(*args)
    assert all(admit_post(*args) == first for _ in range(3))
    assert first is True


def test_auto_filter_uses_median_view_count():
    posts = [Post(view_count=v, comment_count=0) for v in [10, 20, 30, 40, 50]]
    min_view, min_comment = resolve_thresholds(posts, True)
    assert min_view == 30
    assert min_comment == 0
    kept = apply_thresholds(posts, True)
    assert [p.view_count for p in kept] == [30, 40, 50]


def test_explicit_threshold_wins_over_auto():
    posts = [Post(view_count=v, comment_count=c) for v, c in [(10, 1), (20, 5), (30, 9)]]
    kept = apply_thresholds(posts, True, min_view=15)
    # 댓글 기준만 중앙값(5) 적용
    assert [(p.view_count, p.comment_count) for p in kept] == [(20, 5), (30, 9)]


def test_no_thresholds_keeps_everything():
    posts = [Post(view_count=0, comment_count=0)]
    assert apply_thresholds(posts, False) == posts


def test_explicit_thresholds_without_auto():
    posts = [Post(view_count=5, comment_count=0), Post(view_count=50, comment_count=0)]
    assert apply_thresholds(posts, False, min_view=10) == [posts[1]]


def test_auto_filter_on_empty_batch():
    assert apply_thresholds([], True) == []
