class ScrapeError(Exception):
    """수집 파이프라인 공통 예외"""


class SessionExpiredError(ScrapeError):
    """네이버 로그인 세션이 없거나 만료됨 (작업 전체 실패)"""


class SearchRequestError(ScrapeError):
    """카페 검색 API 호출 실패 (해당 카페/키워드만 실패 처리)"""


class SheetSyncError(ScrapeError):
    """구글 시트 웹훅 응답 오류"""


class JobCancelled(Exception):
    """취소 플래그 감지 시 루프를 빠져나오기 위한 신호 (오류 아님)"""
