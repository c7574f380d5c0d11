from datetime import date

import pytest
from django.core.files.storage import default_storage
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from scrape import crawler, progress
from scrape.exceptions import SessionExpiredError, SheetSyncError
from scrape.models import ScrapeComment, ScrapeJob, ScrapePost

from fakes import LOGIN_PAGE, FakeBrowser, article_html, article_rows


def _body(i):
    return f'{i}번 게시글 본문입니다. 집중력을 높이는 공부 습관에 대해 이야기합니다.'


def _pages(ids, **kwargs):
    return {i: article_html(_body(i), **kwargs) for i in ids}


def test_successful_run_persists_posts_and_comments(make_job, session_file, fake_search, settings, monkeypatch):
    sent = []
    settings.GSHEET_WEBHOOK_URL = 'https://hook.example/sheet'
    monkeypatch.setattr(crawler, 'send_rows_to_sheet', lambda url, rows: sent.append(rows) or len(rows))
    fake_search.responses[('10001', '집중')] = [article_rows([1, 2, 3])]
    browser = FakeBrowser(pages=_pages([1, 2, 3]))
    job = make_job()

    status = crawler.run_scrape_job(job.id, browser_factory=browser)

    job.refresh_from_db()
    assert status == ScrapeJob.SUCCESS
    assert job.status == ScrapeJob.SUCCESS
    assert job.result_count == 3
    assert job.sheet_synced == 3
    assert job.started_at is not None and job.completed_at is not None
    assert job.error_message is None
    assert ScrapePost.objects.filter(job=job).count() == 3
    assert set(ScrapePost.objects.filter(job=job).values_list('board_name', flat=True)) == {'자유게시판'}
    assert ScrapeComment.objects.filter(post__job=job).count() == 6
    assert len(sent) == 1 and len(sent[0]) == 3
    assert default_storage.exists(job.result_path)

    document = progress.get_progress(job.id)
    assert document['stage'] == 'DONE'
    assert document['collected'] == 3
    assert document['dbSynced'] == 3
    cell = document['matrix']['10001::집중']
    assert cell['status'] == 'done'
    assert cell['collected'] == 3
    assert cell['pagesScanned'] == 1


def test_page_counts_fall_back_to_search_metadata(make_job, session_file, fake_search):
    html = article_html(_body(1)).replace('조회 100', '').replace('댓글 2', '')
    fake_search.responses[('10001', '집중')] = [article_rows([1])]
    job = make_job()

    crawler.run_scrape_job(job.id, browser_factory=FakeBrowser(pages={1: html}))

    post = ScrapePost.objects.get(job=job)
    assert post.view_count == 1000
    assert post.comment_count == 3
    assert post.like_count == 5


def test_duplicate_content_across_jobs_is_skipped(make_job, session_file, fake_search):
    fake_search.responses[('10001', '집중')] = [article_rows([1, 2])]
    first = make_job()
    crawler.run_scrape_job(first.id, browser_factory=FakeBrowser(pages=_pages([1, 2])))

    fake_search.responses[('10001', '집중')] = [article_rows([1, 3])]
    second = make_job()
    crawler.run_scrape_job(second.id, browser_factory=FakeBrowser(pages=_pages([1, 3])))

    second.refresh_from_db()
    assert second.status == ScrapeJob.SUCCESS
    assert second.result_count == 1
    assert ScrapePost.objects.count() == 3
    assert ScrapePost.objects.filter(job=second).count() == 1
    cell = progress.get_progress(second.id)['matrix']['10001::집중']
    assert cell['skipped'] == 1
    assert cell['collected'] == 2


def test_same_content_from_two_keywords_saved_once(make_job, session_file, fake_search):
    fake_search.responses[('10001', '집중')] = [article_rows([1])]
    fake_search.responses[('10001', '공부')] = [article_rows([2])]
    same = article_html(_body('같은'))
    job = make_job(keywords=['집중', '공부'])

    crawler.run_scrape_job(job.id, browser_factory=FakeBrowser(pages={1: same, 2: same}))

    job.refresh_from_db()
    assert job.result_count == 1
    assert ScrapePost.objects.count() == 1
    assert progress.get_progress(job.id)['matrix']['10001::공부']['skipped'] == 1


def test_auto_filter_drops_below_median(make_job, session_file, fake_search):
    fake_search.responses[('10001', '집중')] = [article_rows([1, 2, 3, 4, 5])]
    pages = {i: article_html(_body(i), views=i * 10, comments=i) for i in range(1, 6)}
    job = make_job(use_auto_filter=True, min_comment_count=0)

    crawler.run_scrape_job(job.id, browser_factory=FakeBrowser(pages=pages))

    views = sorted(ScrapePost.objects.filter(job=job).values_list('view_count', flat=True))
    assert views == [30, 40, 50]


def test_cancellation_between_candidates(make_job, session_file, fake_search):
    job = make_job()
    fake_search.responses[('10001', '집중')] = [article_rows([1, 2, 3, 4, 5, 6])]

    def cancel_after_third(opened):
        if opened == 3:
            progress.request_cancel(job.id)

    browser = FakeBrowser(pages=_pages(range(1, 7)), on_open=cancel_after_third)

    status = crawler.run_scrape_job(job.id, browser_factory=browser)

    job.refresh_from_db()
    assert status == ScrapeJob.CANCELLED
    assert job.status == ScrapeJob.CANCELLED
    assert len(browser.opened) == 3
    assert job.result_count == 3
    assert ScrapePost.objects.filter(job=job).count() == 3
    assert not progress.is_cancel_requested(job.id)
    assert progress.get_progress(job.id)['stage'] == 'CANCELLED'
    assert progress.get_progress(job.id)['matrix']['10001::집중']['status'] == 'skipped'


def test_cancellation_checked_at_keyword_boundary(make_job, session_file, fake_search):
    job = make_job(keywords=['집중', '공부'])
    fake_search.responses[('10001', '집중')] = [article_rows([1])]
    fake_search.responses[('10001', '공부')] = [article_rows([2])]
    browser = FakeBrowser(pages=_pages([1, 2]), on_open=lambda n: progress.request_cancel(job.id))

    crawler.run_scrape_job(job.id, browser_factory=browser)

    assert [call[1] for call in fake_search.calls] == ['집중']
    assert len(browser.opened) == 1


def test_missing_session_file_fails_job(make_job, settings, tmp_path):
    settings.NAVER_CAFE_SESSION_FILE = str(tmp_path / 'missing.json')
    job = make_job()

    with pytest.raises(SessionExpiredError):
        crawler.run_scrape_job(job.id, browser_factory=FakeBrowser())

    job.refresh_from_db()
    assert job.status == ScrapeJob.FAILED
    assert '세션' in job.error_message
    assert job.completed_at is not None
    assert progress.get_progress(job.id)['stage'] == 'FAILED'


def test_login_redirect_fails_job_without_persisting(make_job, session_file, fake_search):
    fake_search.responses[('10001', '집중')] = [article_rows([1, 2, 3])]
    pages = _pages([1])
    pages[2] = LOGIN_PAGE
    browser = FakeBrowser(pages=pages)
    job = make_job(keywords=['집중', '공부'])

    with pytest.raises(SessionExpiredError):
        crawler.run_scrape_job(job.id, browser_factory=browser)

    job.refresh_from_db()
    assert job.status == ScrapeJob.FAILED
    assert len(browser.opened) == 2
    assert ScrapePost.objects.count() == 0
    assert [call[1] for call in fake_search.calls] == ['집중']
    assert progress.get_progress(job.id)['matrix']['10001::집중']['status'] == 'failed'


def test_candidate_failures_are_skipped(make_job, session_file, fake_search):
    fake_search.responses[('10001', '집중')] = [article_rows([1, 2, 3])]
    pages = _pages([3])
    pages[1] = PlaywrightTimeoutError('Timeout 35000ms exceeded')
    pages[2] = '<html><body>짧음</body></html>'
    job = make_job()

    status = crawler.run_scrape_job(job.id, browser_factory=FakeBrowser(pages=pages))

    job.refresh_from_db()
    assert status == ScrapeJob.SUCCESS
    assert job.result_count == 1
    cell = progress.get_progress(job.id)['matrix']['10001::집중']
    assert cell['skipped'] == 2
    assert cell['collected'] == 1


def test_search_failure_marks_cell_and_continues(make_job, session_file, fake_search):
    from scrape.exceptions import SearchRequestError

    fake_search.responses[('10001', '집중')] = [SearchRequestError('HTTP 500')]
    fake_search.responses[('10001', '공부')] = [article_rows([1])]
    job = make_job(keywords=['집중', '공부'])

    crawler.run_scrape_job(job.id, browser_factory=FakeBrowser(pages=_pages([1])))

    job.refresh_from_db()
    assert job.status == ScrapeJob.SUCCESS
    matrix = progress.get_progress(job.id)['matrix']
    assert matrix['10001::집중']['status'] == 'failed'
    assert matrix['10001::공부']['status'] == 'done'


def test_word_and_date_filters(make_job, session_file, fake_search):
    fake_search.responses[('10001', '집중')] = [article_rows([1, 2, 3])]
    pages = {
        1: article_html(_body(1)),
        2: article_html('광고 문의는 쪽지 주세요. 집중 과외 모집합니다 지금 바로.'),
        3: article_html(_body(3), published='2023-01-01T10:00:00+09:00'),
    }
    job = make_job(exclude_words=['광고'], from_date=date(2024, 1, 1), to_date=date(2024, 12, 31))

    crawler.run_scrape_job(job.id, browser_factory=FakeBrowser(pages=pages))

    assert list(ScrapePost.objects.filter(job=job).values_list('content_text', flat=True)) == [_body(1)]
    assert progress.get_progress(job.id)['matrix']['10001::집중']['filteredOut'] == 2


def test_max_posts_stops_collection(make_job, session_file, fake_search):
    fake_search.responses[('10001', '집중')] = [article_rows([1, 2, 3, 4])]
    fake_search.responses[('20002', '집중')] = [article_rows([5])]
    browser = FakeBrowser(pages=_pages(range(1, 6)))
    job = make_job(max_posts=2, cafes=[{'cafeId': '10001'}, {'cafeId': '20002', 'cafeName': '두번째'}])

    crawler.run_scrape_job(job.id, browser_factory=browser)

    job.refresh_from_db()
    assert job.result_count == 2
    assert len(browser.opened) == 2
    assert progress.get_progress(job.id)['matrix']['20002::집중']['status'] == 'skipped'
    assert ScrapePost.objects.filter(job=job, cafe_name='10001').count() == 2


def test_sheet_failure_still_succeeds(make_job, session_file, fake_search, settings, monkeypatch):
    settings.GSHEET_WEBHOOK_URL = 'https://hook.example/sheet'

    def broken(url, rows):
        raise SheetSyncError('Google Sheet sync failed: 500')

    monkeypatch.setattr(crawler, 'send_rows_to_sheet', broken)
    fake_search.responses[('10001', '집중')] = [article_rows([1])]
    job = make_job()

    status = crawler.run_scrape_job(job.id, browser_factory=FakeBrowser(pages=_pages([1])))

    job.refresh_from_db()
    assert status == ScrapeJob.SUCCESS
    assert job.result_count == 1
    assert job.sheet_synced == 0


def test_terminal_job_is_never_rerun(make_job, session_file, fake_search):
    fake_search.responses[('10001', '집중')] = [article_rows([1])]
    job = make_job()
    crawler.run_scrape_job(job.id, browser_factory=FakeBrowser(pages=_pages([1])))

    browser = FakeBrowser(pages=_pages([1]))
    assert crawler.run_scrape_job(job.id, browser_factory=browser) is None
    assert browser.entered == 0

    job.refresh_from_db()
    assert job.status == ScrapeJob.SUCCESS
    assert crawler.finish_job(job.id, ScrapeJob.FAILED) == 0


def test_politeness_delay_after_each_attempt(make_job, session_file, fake_search, settings, monkeypatch):
    settings.SCRAPE_POLITENESS_DELAY = (0.9, 1.5)
    sleeps = []
    monkeypatch.setattr(crawler.time, 'sleep', sleeps.append)
    fake_search.responses[('10001', '집중')] = [article_rows([1, 2])]
    pages = _pages([1])
    pages[2] = PlaywrightTimeoutError('timeout')
    job = make_job()

    crawler.run_scrape_job(job.id, browser_factory=FakeBrowser(pages=pages))

    assert len(sleeps) == 2
    assert all(0.9 <= s <= 1.5 for s in sleeps)


def test_non_finite_search_count_does_not_fail_job(make_job, session_file, fake_search):
    fake_search.responses[('10001', '집중')] = [article_rows([1], readCount='Infinity')]
    html = article_html(_body(1)).replace('조회 100', '')
    job = make_job()

    status = crawler.run_scrape_job(job.id, browser_factory=FakeBrowser(pages={1: html}))

    assert status == ScrapeJob.SUCCESS
    assert ScrapePost.objects.get(job=job).view_count == 0
