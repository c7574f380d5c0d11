"""
게시글 본문/댓글 추출 단계

본문 컨테이너는 우선순위가 있는 matcher 체인으로 찾는다.
각 matcher는 (find, extract) 쌍이며, 요소를 찾았고 추출 텍스트가 20자 이상이면 채택한다.
"""
import re
from collections import namedtuple

from bs4 import BeautifulSoup

from scrape.exceptions import SessionExpiredError
from scrape.package.naver_browser import build_article_url
from scrape.package.naver_session import is_login_redirect
from scrape.utils import parse_count_text, to_datetime_safe


MIN_CONTENT_LENGTH = 20
MAX_COMMENTS = 120
COMMENT_MIN_LENGTH = 2
COMMENT_MAX_LENGTH = 500

ContentMatcher = namedtuple('ContentMatcher', ['name', 'find', 'extract'])

ParsedComment = namedtuple('ParsedComment', ['author_name', 'body', 'like_count', 'written_at'])

ParsedPost = namedtuple(
    'ParsedPost',
    [
        'source_url', 'cafe_id', 'cafe_name', 'keyword', 'title', 'author_name', 'published_at',
        'view_count', 'like_count', 'comment_count', 'content_text', 'raw_html', 'comments', 'board_name',
    ],
    defaults=('',),
)


def _element_text(element):
    return element.get_text('\n', strip=True)


def _selector_matcher(selector):
    return ContentMatcher(
        name=selector,
        find=lambda soup: soup.select_one(selector),
        extract=_element_text,
    )


CONTENT_MATCHERS = [
    _selector_matcher('.se-main-container'),
    _selector_matcher('#tbody'),
    _selector_matcher('#postContent'),
    _selector_matcher('.ContentRenderer'),
    _selector_matcher('article'),
    _selector_matcher('body'),
]

TITLE_SELECTORS = ['h3.title_text', '.title_text', 'h3', 'h2']
AUTHOR_SELECTORS = ['.nickname', '.nick', '.author', '.name']

VIEW_PATTERN = re.compile(r'조회\s*([\d,]+)')
LIKE_PATTERN = re.compile(r'좋아요\s*([\d,]+)')
COMMENT_PATTERN = re.compile(r'댓글\s*([\d,]+)')


def match_content(soup, matchers=CONTENT_MATCHERS):
    """첫 번째로 통과한 matcher의 (text, element) 반환. 없으면 (None, None)"""
    for matcher in matchers:
        element = matcher.find(soup)
        if element is None:
            continue
        text = (matcher.extract(element) or '').strip()
        if len(text) < MIN_CONTENT_LENGTH:
            continue
        return text, element
    return None, None


def _first_text(soup, selectors):
    for selector in selectors:
        element = soup.select_one(selector)
        if element:
            text = element.get_text(strip=True)
            if text:
                return text
    return ''


def _labelled_count(pattern, text):
    match = pattern.search(text or '')
    return parse_count_text(match.group(1)) if match else 0


def _extract_published_at(soup):
    time_tag = soup.find('time')
    if time_tag:
        parsed = to_datetime_safe(time_tag.get('datetime'))
        if parsed:
            return parsed
        parsed = to_datetime_safe(time_tag.get_text(strip=True))
        if parsed:
            return parsed
    date_tag = soup.select_one('.date')
    if date_tag:
        return to_datetime_safe(date_tag.get_text(strip=True))
    return None


def _has_comment_class(element):
    classes = element.get('class') or []
    return any('comment' in cls.lower() for cls in classes)


def _comment_block(text_node):
    """본문 노드(.text_comment)가 속한 댓글 1건의 블록. 작성자/날짜는 이 안에서 찾는다"""
    item = text_node.find_parent('li')
    if item is not None and len(item.select('.text_comment')) == 1:
        return item
    block = text_node
    for parent in text_node.parents:
        if parent.name not in ('li', 'div') or not _has_comment_class(parent):
            break
        if len(parent.select('.text_comment')) != 1:
            break
        block = parent
    return block


def _parse_comment(block, body):
    if len(body) < COMMENT_MIN_LENGTH or len(body) > COMMENT_MAX_LENGTH:
        return None
    author_tag = block.select_one('.comment_nickname')
    date_tag = block.select_one('.comment_info_date')
    return ParsedComment(
        author_name=author_tag.get_text(strip=True) if author_tag else '',
        body=body,
        like_count=_labelled_count(LIKE_PATTERN, block.get_text(' ', strip=True)),
        written_at=to_datetime_safe(date_tag.get_text(strip=True)) if date_tag else None,
    )


def _comment_candidates(soup):
    text_nodes = soup.select('.text_comment')
    if text_nodes:
        for node in text_nodes:
            yield _comment_block(node), node.get_text(' ', strip=True)
        return

    # 본문 마커가 없는 구형 마크업: class에 'comment'가 들어간 li/div 중 가장 안쪽 블록
    for element in soup.find_all(['li', 'div']):
        if not _has_comment_class(element):
            continue
        if element.find(lambda tag: tag.name in ('li', 'div') and _has_comment_class(tag)):
            continue
        yield element, element.get_text(' ', strip=True)


def extract_comments(soup, limit=MAX_COMMENTS):
    """댓글 추출 (본문 2~500자, 최대 limit건)"""
    comments = []
    for block, body in _comment_candidates(soup):
        comment = _parse_comment(block, body)
        if comment is None:
            continue
        comments.append(comment)
        if len(comments) >= limit:
            break
    return comments


def parse_article(snapshot, cafe_id, cafe_name, keyword=''):
    """렌더링된 페이지에서 게시글 파싱. 본문 컨테이너를 못 찾으면 None (건너뜀)"""
    soup = BeautifulSoup(snapshot.html or '', 'html.parser')

    content_text, content_element = match_content(soup)
    if not content_text:
        return None

    full_text = snapshot.text or soup.get_text('\n', strip=True)
    title = _first_text(soup, TITLE_SELECTORS)
    if not title and soup.title:
        title = soup.title.get_text(strip=True)

    return ParsedPost(
        source_url=snapshot.url,
        cafe_id=cafe_id,
        cafe_name=cafe_name,
        keyword=keyword,
        title=title,
        author_name=_first_text(soup, AUTHOR_SELECTORS),
        published_at=_extract_published_at(soup),
        view_count=_labelled_count(VIEW_PATTERN, full_text),
        like_count=_labelled_count(LIKE_PATTERN, full_text),
        comment_count=_labelled_count(COMMENT_PATTERN, full_text),
        content_text=content_text,
        raw_html=str(content_element),
        comments=extract_comments(soup),
    )


def fetch_article(browser, cafe_id, cafe_name, article_id, keyword=''):
    """상세 페이지를 열어 파싱

    Raises:
        SessionExpiredError: 로그인 페이지로 리다이렉트됨 (이후 후보도 전부 실패하므로 작업 중단)
    """
    snapshot = browser.open(build_article_url(cafe_id, article_id))
    if is_login_redirect(snapshot.url):
        raise SessionExpiredError("네이버 로그인 세션이 만료되었습니다.")
    return parse_article(snapshot, cafe_id, cafe_name, keyword)
