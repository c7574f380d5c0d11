import requests
import random
from urllib.parse import quote

from scrape.exceptions import SearchRequestError


SEARCH_API_URL = 'https://apis.naver.com/cafe-web/cafe-mobile/CafeMobileWebArticleSearchListV4'


def generate_user_agent():
    os_versions = ["Windows NT 10.0; Win64; x64", "Macintosh; Intel Mac OS X 10_15_7", "X11; Linux x86_64"]
    chrome_versions = ["120.0.0.0", "122.0.0.0", "124.0.0.0", "126.0.0.0"]

    os_version = random.choice(os_versions)
    chrome_version = random.choice(chrome_versions)

    return f"Mozilla/5.0 ({os_version}) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/{chrome_version} Safari/537.36"


def build_search_url(cafe_id, keyword, page, per_page):
    return (
        f"{SEARCH_API_URL}?cafeId={quote(str(cafe_id))}&query={quote(keyword)}"
        f"&searchBy=1&sortBy=date&page={page}&perPage={per_page}"
        f"&adUnit=MW_CAFE_BOARD&ad=true"
    )


def get_article_list(cafe_id, keyword, page, per_page, cookies=None, timeout=15):
    """카페 내 키워드 검색 1페이지 조회 (최신순)

    Returns:
        (article_list, total_count) 튜플. article_list는 API 원본 row 목록
    """
    headers = {
        "User-Agent": generate_user_agent(),
        "Accept": "application/json, text/plain, */*",
        "Referer": "https://cafe.naver.com/",
        "Accept-Language": "ko-KR,ko;q=0.9,en-US;q=0.8,en;q=0.7"
    }
    url = build_search_url(cafe_id, keyword, page, per_page)
    try:
        response = requests.get(url, headers=headers, cookies=cookies or {}, timeout=timeout)
    except requests.RequestException as e:
        raise SearchRequestError(f"검색 요청 실패: {e} ({url})") from e

    if response.status_code != 200:
        raise SearchRequestError(f"검색 실패: HTTP {response.status_code} ({url})")

    try:
        result = (response.json().get('message') or {}).get('result') or {}
    except ValueError as e:
        raise SearchRequestError(f"검색 응답 파싱 실패: {e} ({url})") from e

    article_list = result.get('articleList')
    if not isinstance(article_list, list):
        article_list = []
    total_count = result.get('totalCount')
    return article_list, total_count
