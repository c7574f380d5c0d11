"""
Playwright 기반 브라우저 세션
로그인된 storageState로 카페 글을 열어 렌더링된 HTML/텍스트를 돌려준다.
"""
from collections import namedtuple

from playwright.sync_api import sync_playwright


PageSnapshot = namedtuple('PageSnapshot', ['url', 'html', 'text'])

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


def build_article_url(cafe_id, article_id):
    return f"https://cafe.naver.com/ca-fe/cafes/{cafe_id}/articles/{article_id}"


class CafeBrowser:
    """작업 1건 동안만 사용하는 브라우저 컨텍스트 (with 문으로 사용)"""

    def __init__(self, session_file, headless=True, timeout_ms=35000, settle_ms=1200):
        self.session_file = session_file
        self.headless = headless
        self.timeout_ms = timeout_ms
        self.settle_ms = settle_ms
        self._playwright = None
        self._browser = None
        self._context = None
        self._page = None

    def __enter__(self):
        self._playwright = sync_playwright().start()
        self._browser = self._playwright.chromium.launch(
            headless=self.headless,
            args=["--disable-blink-features=AutomationControlled"],
        )
        self._context = self._browser.new_context(
            storage_state=self.session_file,
            locale="ko-KR",
            viewport={"width": 1366, "height": 900},
            user_agent=USER_AGENT,
        )
        self._page = self._context.new_page()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def close(self):
        if self._context is not None:
            self._context.close()
            self._context = None
        if self._browser is not None:
            self._browser.close()
            self._browser = None
        if self._playwright is not None:
            self._playwright.stop()
            self._playwright = None

    def open(self, url):
        """URL 이동 후 스냅샷 반환. 구형 카페 글은 cafe_main iframe 문서를 읽는다"""
        page = self._page
        page.goto(url, wait_until="domcontentloaded", timeout=self.timeout_ms)
        page.wait_for_timeout(self.settle_ms)

        frame = page.frame(name="cafe_main") or page.main_frame
        html = frame.content()
        text = frame.locator("body").inner_text(timeout=self.timeout_ms)
        return PageSnapshot(url=page.url, html=html, text=text)
