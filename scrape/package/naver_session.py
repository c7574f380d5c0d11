import json
import os

from django.conf import settings

from scrape.exceptions import SessionExpiredError


LOGIN_REDIRECT_MARKER = 'nidlogin'


def get_session_file():
    return settings.NAVER_CAFE_SESSION_FILE


def ensure_session_file():
    """세션 파일이 없으면 작업을 시작할 수 없다"""
    session_file = get_session_file()
    if not session_file or not os.path.exists(session_file):
        raise SessionExpiredError(
            f"카페 로그인 세션 파일이 없습니다. 먼저 로그인 세션을 저장하세요. ({session_file})"
        )
    return session_file


def load_session_cookies(session_file=None):
    """Playwright storageState에서 naver.com 쿠키만 requests용 dict로 추출"""
    session_file = session_file or get_session_file()
    if not session_file or not os.path.exists(session_file):
        return {}
    with open(session_file, 'r', encoding='utf-8') as file:
        state = json.load(file)
    cookies = {}
    for cookie in state.get('cookies', []):
        if 'naver.com' in (cookie.get('domain') or ''):
            cookies[cookie['name']] = cookie.get('value', '')
    return cookies


def is_login_redirect(url):
    return LOGIN_REDIRECT_MARKER in (url or '')
