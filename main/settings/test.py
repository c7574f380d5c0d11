"""
pytest 실행용 설정입니다.
"""
import tempfile

from main.settings.base import *

DEBUG = False
SECRET_KEY = 'test-secret-key'

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

MEDIA_ROOT = tempfile.mkdtemp(prefix='scrape-test-media-')
STORAGES = {
    **STORAGES,
    'default': {'BACKEND': 'django.core.files.storage.FileSystemStorage'},
}

CELERY_BROKER_URL = 'memory://'
CELERY_TASK_ALWAYS_EAGER = True

GSHEET_WEBHOOK_URL = ''
SCRAPE_POLITENESS_DELAY = (0, 0)
