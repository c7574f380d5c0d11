import json

import pytest

from scrape.models import ScrapeJob

from fakes import FakeRedis, FakeSearch


@pytest.fixture
def fake_search(monkeypatch):
    search = FakeSearch()
    monkeypatch.setattr('scrape.package.naver_search.get_article_list', search)
    return search


@pytest.fixture
def fake_redis(monkeypatch):
    redis = FakeRedis()
    monkeypatch.setattr('scrape.tasks.get_redis_connection', lambda: redis)
    return redis


@pytest.fixture
def session_file(tmp_path, settings):
    path = tmp_path / 'naver-cafe-session.json'
    path.write_text(json.dumps({
        'cookies': [
            {'name': 'NID_AUT', 'value': 'aut', 'domain': '.naver.com'},
            {'name': 'NID_SES', 'value': 'ses', 'domain': '.naver.com'},
            {'name': 'other', 'value': 'x', 'domain': '.example.com'},
        ],
        'origins': [],
    }), encoding='utf-8')
    settings.NAVER_CAFE_SESSION_FILE = str(path)
    return path


@pytest.fixture
def make_job(db):
    def _make_job(**fields):
        defaults = {
            'keywords': ['집중'],
            'cafes': [{'cafeId': '10001', 'cafeName': '공부카페'}],
            'max_posts': 100,
        }
        defaults.update(fields)
        return ScrapeJob.objects.create(**defaults)
    return _make_job
