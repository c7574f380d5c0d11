"""
로컬 개발 환경 설정입니다.
"""
from main.settings.base import *

DEBUG = os.environ.get("DEBUG")
SECRET_KEY = os.environ.get("SECRET_KEY")

# 도커 설정
DATABASES = {
    "default": {
        "ENGINE": os.environ.get("SQL_ENGINE", "django.db.backends.sqlite3"),
        "NAME": os.environ.get("SQL_DATABASE", os.path.join(BASE_DIR, "db.sqlite3")),
        "USER": os.environ.get("SQL_USER", "user"),
        "PASSWORD": os.environ.get("SQL_PASSWORD", "password"),
        "HOST": os.environ.get("SQL_HOST", "localhost"),
        "PORT": os.environ.get("SQL_PORT", "5432"),
    }
}

# 로컬에서는 백업 파일을 media 폴더에 저장
STORAGES = {
    **STORAGES,
    'default': {'BACKEND': 'django.core.files.storage.FileSystemStorage'},
}
