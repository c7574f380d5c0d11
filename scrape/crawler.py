"""
카페 수집 작업 실행기

작업 1건을 처음부터 끝까지 순차 실행한다.
카페(입력 순) → 키워드(입력 순) → 후보(검색 결과 순), 병렬 처리 없음.

상태: QUEUED → RUNNING → SUCCESS | FAILED | CANCELLED
"""
import logging
import random
import sys
import time
from datetime import datetime

import requests
from django.conf import settings
from django.db import transaction

from scrape import progress
from scrape.exceptions import JobCancelled, SearchRequestError, SessionExpiredError, SheetSyncError
from scrape.export import export_posts
from scrape.extract import fetch_article
from scrape.filters import admit_post, apply_thresholds
from scrape.models import ScrapeComment, ScrapeJob, ScrapePost
from scrape.package.naver_browser import CafeBrowser, build_article_url
from scrape.package.naver_session import ensure_session_file, load_session_cookies
from scrape.package.sheets import build_post_row, send_rows_to_sheet
from scrape.search import search_candidates
from scrape.utils import content_hash


logger = logging.getLogger(__name__)


def _log(msg):
    print(msg, flush=True, file=sys.stderr)


def politeness_sleep():
    """후보 1건 처리 후 지터를 준 대기 (기본 0.9~1.5초)"""
    low, high = settings.SCRAPE_POLITENESS_DELAY
    if high > 0:
        time.sleep(random.uniform(low, high))


# ============================================================
# 상태 전이 (조건부 update로 단조 증가 보장)
# ============================================================

def claim_job(job_id):
    """QUEUED → RUNNING. 이미 다른 곳에서 가져갔거나 취소됐으면 False"""
    rows_updated = ScrapeJob.objects.filter(
        id=job_id, status=ScrapeJob.QUEUED
    ).update(status=ScrapeJob.RUNNING, started_at=datetime.now(), error_message=None)
    return bool(rows_updated)


def finish_job(job_id, status, **fields):
    """RUNNING → 종료 상태. 종료 상태끼리는 전이하지 않는다"""
    return ScrapeJob.objects.filter(
        id=job_id, status=ScrapeJob.RUNNING
    ).update(status=status, completed_at=datetime.now(), **fields)


# ============================================================
# 실행기
# ============================================================

class ScrapeJobExecutor:

    def __init__(self, job, browser_factory=None):
        self.job = job
        self.browser_factory = browser_factory or CafeBrowser
        self.reporter = progress.ProgressReporter(job.id, pages_target=settings.SCRAPE_SEARCH_MAX_PAGES)
        self.collected = []
        self.cancelled = False
        self.active_cell = None

    # ---------- 수집 ----------

    def _reached_max(self):
        return len(self.collected) >= self.job.max_posts

    def close_active_cell(self, status):
        """중단 시 처리 중이던 셀을 종료 상태로 남긴다"""
        if self.active_cell is None:
            return
        cafe_id, keyword = self.active_cell
        self.active_cell = None
        self.reporter.update_cell(cafe_id, keyword, status=status)

    def _check_cancel(self):
        if progress.is_cancel_requested(self.job.id):
            raise JobCancelled()

    def _collect(self, browser, cookies):
        keywords = [k.strip() for k in self.job.keywords or [] if k and k.strip()]

        for cafe_id, cafe_name in self.job.cafe_pairs():
            seen_ids = set()
            for keyword in keywords:
                if self._reached_max():
                    self.reporter.update_cell(cafe_id, keyword, status='skipped')
                    continue
                self._check_cancel()
                self._process_keyword(browser, cookies, cafe_id, cafe_name, keyword, seen_ids)

    def _process_keyword(self, browser, cookies, cafe_id, cafe_name, keyword, seen_ids):
        self.active_cell = (cafe_id, keyword)
        self.reporter.set_stage('SEARCHING', cafe_id=cafe_id, keyword=keyword)
        self.reporter.update_cell(cafe_id, keyword, status='searching')

        try:
            candidates = search_candidates(
                cafe_id, keyword,
                reporter=self.reporter,
                seen_ids=seen_ids,
                cookies=cookies,
                page_size=settings.SCRAPE_SEARCH_PAGE_SIZE,
                max_pages=settings.SCRAPE_SEARCH_MAX_PAGES,
                timeout=settings.SCRAPE_SEARCH_TIMEOUT,
            )
        except SearchRequestError as e:
            logger.warning(f"[검색 실패] job={self.job.id} cafe={cafe_id} keyword={keyword}: {e}")
            self.reporter.update_cell(cafe_id, keyword, status='failed', error=str(e))
            self.active_cell = None
            return

        _log(f"[후보] job={self.job.id} cafe={cafe_id} keyword={keyword} 후보={len(candidates)}")
        self.reporter.set_stage('PARSING', cafe_id=cafe_id, keyword=keyword)
        self.reporter.update_cell(cafe_id, keyword, status='parsing')

        for candidate in candidates:
            if self._reached_max():
                break
            self._check_cancel()
            self._process_candidate(browser, cafe_id, cafe_name, keyword, candidate)
            politeness_sleep()

        self.reporter.update_cell(cafe_id, keyword, status='done')
        self.active_cell = None

    def _process_candidate(self, browser, cafe_id, cafe_name, keyword, candidate):
        try:
            post = fetch_article(browser, cafe_id, cafe_name, candidate.article_id, keyword)
        except SessionExpiredError:
            raise
        except Exception as e:
            # 타임아웃/파싱 오류는 해당 후보만 건너뜀
            url = build_article_url(cafe_id, candidate.article_id)
            logger.warning(f"[후보 실패] job={self.job.id} {url}: {e}")
            self.reporter.increment(cafe_id, keyword, 'skipped')
            return

        if post is None:
            self.reporter.increment(cafe_id, keyword, 'skipped')
            return

        # 페이지에서 못 읽은 값은 검색 결과 메타데이터로 보완
        post = post._replace(
            title=post.title or candidate.subject,
            view_count=post.view_count or candidate.view_count,
            like_count=post.like_count or candidate.like_count,
            comment_count=post.comment_count or candidate.comment_count,
            board_name=post.board_name or candidate.board_name,
        )

        if not admit_post(
            post.title, post.content_text, post.published_at,
            include_words=self.job.include_words,
            exclude_words=self.job.exclude_words,
            from_date=self.job.from_date,
            to_date=self.job.to_date,
        ):
            self.reporter.increment(cafe_id, keyword, 'filteredOut')
            return

        self.collected.append(post)
        self.reporter.increment(cafe_id, keyword, 'collected')
        self.reporter.set_totals(collected=len(self.collected))

    # ---------- 저장 ----------

    def _final_batch(self):
        filtered = apply_thresholds(
            self.collected,
            self.job.use_auto_filter,
            self.job.min_view_count,
            self.job.min_comment_count,
        )
        return filtered[:self.job.max_posts]

    def _save_post(self, post):
        """본문 해시 기준으로 없을 때만 저장. 저장했으면 ScrapePost, 중복이면 None"""
        with transaction.atomic():
            saved, created = ScrapePost.objects.create_if_absent(
                content_hash(post.content_text),
                job=self.job,
                source_url=post.source_url,
                cafe_id=post.cafe_id,
                cafe_name=post.cafe_name,
                keyword=post.keyword,
                board_name=post.board_name,
                title=post.title,
                author_name=post.author_name,
                published_at=post.published_at,
                view_count=post.view_count,
                like_count=post.like_count,
                comment_count=post.comment_count,
                content_text=post.content_text,
                raw_html=post.raw_html,
            )
            if not created:
                return None

            ScrapeComment.objects.bulk_create([
                ScrapeComment(
                    post=saved,
                    author_name=comment.author_name,
                    body=comment.body,
                    like_count=comment.like_count,
                    written_at=comment.written_at,
                )
                for comment in post.comments
            ])
        return saved

    def _commit(self, final_posts):
        self.reporter.set_stage('SAVING')
        saved_posts = []
        for post in final_posts:
            if self._save_post(post) is None:
                self.reporter.increment(post.cafe_id, post.keyword, 'skipped')
                continue
            saved_posts.append(post)
        self.reporter.set_totals(dbSynced=len(saved_posts))
        return saved_posts

    def _export(self, final_posts):
        self.reporter.set_stage('EXPORTING')
        try:
            return export_posts(self.job.id, final_posts)
        except Exception:
            logger.exception(f"[백업 실패] job={self.job.id}")
            return ''

    def _sync_sheet(self, saved_posts):
        self.reporter.set_stage('SYNCING')
        rows = [
            build_post_row(self.job.id, post._asdict(), [c._asdict() for c in post.comments])
            for post in saved_posts
        ]
        try:
            synced = send_rows_to_sheet(settings.GSHEET_WEBHOOK_URL, rows)
        except (SheetSyncError, requests.RequestException) as e:
            logger.error(f"Google Sheet 동기화 실패: job={self.job.id} {e}")
            synced = 0
        self.reporter.set_totals(sheetSynced=synced)
        return synced

    # ---------- 진입점 ----------

    def run(self):
        self.reporter.set_stage('STARTING')
        session_file = ensure_session_file()
        cookies = load_session_cookies(session_file)

        try:
            with self.browser_factory(
                session_file,
                headless=settings.SCRAPE_HEADLESS,
                timeout_ms=settings.SCRAPE_NAVIGATION_TIMEOUT_MS,
            ) as browser:
                self._collect(browser, cookies)
        except JobCancelled:
            self.cancelled = True
            self.close_active_cell('skipped')
            _log(f"[취소] job={self.job.id} 수집={len(self.collected)}")

        self.reporter.set_stage('FILTERING')
        final_posts = self._final_batch()
        saved_posts = self._commit(final_posts)

        if self.cancelled:
            finish_job(self.job.id, ScrapeJob.CANCELLED, result_count=len(saved_posts))
            self.reporter.set_stage('CANCELLED', message='cancelled')
            return ScrapeJob.CANCELLED

        result_path = self._export(final_posts)
        synced = self._sync_sheet(saved_posts)

        finish_job(
            self.job.id, ScrapeJob.SUCCESS,
            result_count=len(saved_posts),
            sheet_synced=synced,
            result_path=result_path,
        )
        self.reporter.set_stage('DONE')
        _log(f"[완료] job={self.job.id} 수집={len(self.collected)} 저장={len(saved_posts)} 시트={synced}")
        return ScrapeJob.SUCCESS


def run_scrape_job(job_id, browser_factory=None):
    """작업 1건 실행. 예외가 나면 FAILED로 기록한 뒤 다시 던진다

    Returns:
        종료 상태 문자열. 가져갈 수 없는 작업이면 None
    """
    if not claim_job(job_id):
        logger.info(f"[건너뜀] job={job_id} QUEUED 상태가 아님")
        return None

    job = ScrapeJob.objects.get(id=job_id)
    _log(f"[작업 시작] job={job_id} 카페={len(job.cafes)} 키워드={len(job.keywords)} 최대={job.max_posts}")
    executor = ScrapeJobExecutor(job, browser_factory=browser_factory)
    try:
        return executor.run()
    except Exception as e:
        message = str(e) or e.__class__.__name__
        logger.error(f"[작업 실패] job={job_id}: {message}")
        executor.close_active_cell('failed')
        finish_job(job_id, ScrapeJob.FAILED, error_message=message)
        executor.reporter.set_stage('FAILED', message=message)
        raise
    finally:
        progress.clear_cancel(job_id)
