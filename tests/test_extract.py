from datetime import datetime

import pytest
from bs4 import BeautifulSoup

from scrape.exceptions import SessionExpiredError
from scrape.extract import (
    CONTENT_MATCHERS,
    ContentMatcher,
    extract_comments,
    fetch_article,
    match_content,
    parse_article,
)
from scrape.package.naver_browser import PageSnapshot

from fakes import LOGIN_PAGE, FakeBrowser, article_html


BODY = '오늘은 집중력을 높이는 공부 방법을 정리해 보았습니다. 타이머를 쓰면 좋아요.'


def _snapshot(html, url='https://cafe.naver.com/ca-fe/cafes/10001/articles/1'):
    return PageSnapshot(url=url, html=html, text='')


def test_parse_article_full_page():
    post = parse_article(_snapshot(article_html(BODY, views='1,234', comments=2, likes=7)), '10001', '공부카페', '집중')

    assert post.title == '집중력 높이는 방법'
    assert post.author_name == '작성자'
    assert post.content_text == BODY
    assert post.view_count == 1234
    assert post.comment_count == 2
    assert post.like_count == 7
    assert post.published_at == datetime(2024, 5, 1, 10, 0)
    assert post.keyword == '집중'
    assert 'se-main-container' in post.raw_html
    assert [c.body for c in post.comments] == ['좋은 정보 감사합니다', '저도 궁금했어요']
    assert post.comments[0].author_name == '독자1'
    assert post.comments[0].written_at == datetime(2024, 5, 2, 9, 30)
    assert post.comments[1].written_at is None


def test_matcher_chain_falls_back_when_first_is_too_short():
    html = (
        '<html><body><div class="se-main-container">짧음</div>'
        '<div id="tbody">두 번째 후보 컨테이너에 충분히 긴 본문이 들어 있습니다.</div></body></html>'
    )
    text, element = match_content(BeautifulSoup(html, 'html.parser'))
    assert text.startswith('두 번째 후보')
    assert element.get('id') == 'tbody'


def test_matcher_chain_accepts_custom_matchers():
    soup = BeautifulSoup('<html><body><p class="x">이 문단은 스무 글자가 넘는 본문 텍스트입니다.</p></body></html>', 'html.parser')
    matchers = [ContentMatcher('p.x', lambda s: s.select_one('p.x'), lambda el: el.get_text())]
    text, _ = match_content(soup, matchers)
    assert text.startswith('이 문단은')


def test_unparseable_page_returns_none():
    html = '<html><body>짧은 본문</body></html>'
    assert parse_article(_snapshot(html), '10001', '공부카페') is None
    assert CONTENT_MATCHERS[-1].name == 'body'


def test_unparseable_dates_become_none():
    html = article_html(BODY, published='어제 오후')
    post = parse_article(_snapshot(html), '10001', '공부카페')
    assert post.published_at is None


def test_published_from_text_when_attribute_missing():
    html = article_html(BODY).replace('datetime="2024-05-01T10:00:00+09:00"', '')
    html = html.replace('>2024-05-01T10:00:00+09:00<', '>2024.04.30. 18:05<')
    post = parse_article(_snapshot(html), '10001', '공부카페')
    assert post.published_at == datetime(2024, 4, 30, 18, 5)


def test_comments_bounded_by_length_and_count():
    items = '<li class="comment_item">x</li>'
    items += f'<li class="comment_item">{"가" * 501}</li>'
    items += ''.join(f'<li class="comment_item">댓글 본문 {i}</li>' for i in range(150))
    soup = BeautifulSoup(f'<ul>{items}</ul>', 'html.parser')

    comments = extract_comments(soup)

    assert len(comments) == 120
    assert all(2 <= len(c.body) <= 500 for c in comments)
    assert comments[0].body == '댓글 본문 0'


def test_comment_container_is_not_counted_as_comment():
    html = '<div class="CommentBox"><ul><li class="CommentItem">첫 댓글 좋아요 3</li></ul></div>'
    comments = extract_comments(BeautifulSoup(html, 'html.parser'))
    assert len(comments) == 1
    assert comments[0].like_count == 3


def test_fetch_article_login_redirect_is_fatal():
    browser = FakeBrowser(pages={5: LOGIN_PAGE})
    with pytest.raises(SessionExpiredError):
        fetch_article(browser, '10001', '공부카페', 5)


def test_fetch_article_builds_detail_url():
    browser = FakeBrowser(pages={9: article_html(BODY)})
    post = fetch_article(browser, '10001', '공부카페', 9, '집중')
    assert browser.opened == ['https://cafe.naver.com/ca-fe/cafes/10001/articles/9']
    assert post.source_url == browser.opened[0]


NESTED_COMMENT = (
    '<li class="CommentItem"><div class="comment_area"><div class="comment_box">'
    '<div class="comment_nick_box"><a class="comment_nickname">{author}</a></div>'
    '<div class="comment_text_box"><span class="text_comment">{body}</span></div>'
    '<div class="comment_info_box"><span class="comment_info_date">2024.05.02. 09:30</span>'
    '<a class="comment_info_button">답글쓰기</a></div>'
    '</div></div></li>'
)


def test_nested_comment_markup_yields_one_comment_per_item():
    html = '<ul class="comment_list">' + NESTED_COMMENT.format(author='독자1', body='좋은 정보 감사합니다') + '</ul>'

    comments = extract_comments(BeautifulSoup(html, 'html.parser'))

    assert len(comments) == 1
    assert comments[0].author_name == '독자1'
    assert comments[0].body == '좋은 정보 감사합니다'
    assert comments[0].written_at == datetime(2024, 5, 2, 9, 30)


def test_nested_comment_cap_counts_real_comments():
    items = ''.join(NESTED_COMMENT.format(author=f'독자{i}', body=f'댓글 본문 {i}') for i in range(130))

    comments = extract_comments(BeautifulSoup(f'<ul>{items}</ul>', 'html.parser'))

    assert len(comments) == 120
    assert comments[119].author_name == '독자119'


def test_comment_block_without_list_item():
    html = (
        '<div class="comment_list">'
        '<div class="comment_box"><span class="comment_nickname">가</span>'
        '<span class="text_comment">첫 번째 댓글</span></div>'
        '<div class="comment_box"><span class="comment_nickname">나</span>'
        '<span class="text_comment">두 번째 댓글</span></div>'
        '</div>'
    )

    comments = extract_comments(BeautifulSoup(html, 'html.parser'))

    assert [(c.author_name, c.body) for c in comments] == [('가', '첫 번째 댓글'), ('나', '두 번째 댓글')]
