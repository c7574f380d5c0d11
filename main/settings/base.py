import os

BASE_DIR = os.path.dirname(os.path.dirname(
    os.path.dirname(os.path.abspath(__file__))))

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',

    # apps
    'scrape',

    # 3rd apps
    'corsheaders',
    'storages',
    "django_celery_beat",
    "django_celery_results",
]

MIDDLEWARE = [
    'corsheaders.middleware.CorsMiddleware',
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'main.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

LANGUAGE_CODE = 'ko-kr'

TIME_ZONE = 'Asia/Seoul'

USE_I18N = True

USE_TZ = False

STATIC_URL = '/static/'
STATIC_ROOT = os.path.join(BASE_DIR, 'static')

MEDIA_URL = '/media/'
MEDIA_ROOT = os.path.join(BASE_DIR, 'media')

AWS_ACCESS_KEY_ID = os.environ.get('AWS_ACCESS_KEY_ID')
AWS_SECRET_ACCESS_KEY = os.environ.get('AWS_SECRET_ACCESS_KEY')
AWS_REGION = 'ap-northeast-2'

AWS_STORAGE_BUCKET_NAME = os.environ.get('AWS_STORAGE_BUCKET_NAME', 'cafe-scrape-backup')
AWS_S3_CUSTOM_DOMAIN = '%s.s3.%s.amazonaws.com' % (AWS_STORAGE_BUCKET_NAME, AWS_REGION)
AWS_S3_OBJECT_PARAMETERS = {
    'CacheControl': 'max-age=86400',
}

# 백업 엑셀은 기본 스토리지(S3)에 저장
STORAGES = {
    'default': {'BACKEND': 'storages.backends.s3boto3.S3Boto3Storage'},
    'staticfiles': {'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage'},
}
DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

CORS_ORIGIN_ALLOW_ALL = True
CORS_ALLOW_CREDENTIALS = True
CORS_ORIGIN_WHITELIST = [
    'http://127.0.0.1:3000',
    'http://localhost:3000'
]

CELERY_BROKER_URL = os.environ.get('CELERY_BROKER_URL', 'redis://redis:6379/0')
CELERY_RESULT_BACKEND = 'django-db'
CELERY_WORKER_PREFETCH_MULTIPLIER = 1
CELERY_TASK_ACKS_LATE = True
CELERY_WORKER_MAX_TASKS_PER_CHILD = 100
CELERY_TASK_SERIALIZER = 'json'
CELERY_RESULT_SERIALIZER = 'json'
CELERY_ACCEPT_CONTENT = ['json']
CELERY_BEAT_SCHEDULER = 'django_celery_beat.schedulers:DatabaseScheduler'

# 네이버 카페 세션 (Playwright storageState 파일)
NAVER_CAFE_SESSION_FILE = os.environ.get(
    'NAVER_CAFE_SESSION_FILE',
    os.path.join(BASE_DIR, 'playwright', 'storage', 'naver-cafe-session.json'),
)

# 구글 시트 웹훅 (비어 있으면 동기화 생략)
GSHEET_WEBHOOK_URL = os.environ.get('GSHEET_WEBHOOK_URL', '')

# 수집 파이프라인 설정
SCRAPE_QUEUE_INTERVAL = float(os.environ.get('SCRAPE_QUEUE_INTERVAL', '5'))
SCRAPE_QUEUE_LEASE_TTL = 6 * 60 * 60
SCRAPE_SEARCH_PAGE_SIZE = 50
SCRAPE_SEARCH_MAX_PAGES = 4
SCRAPE_SEARCH_TIMEOUT = 15
SCRAPE_POLITENESS_DELAY = (0.9, 1.5)
SCRAPE_NAVIGATION_TIMEOUT_MS = int(os.environ.get('SCRAPE_NAVIGATION_TIMEOUT_MS', '35000'))
SCRAPE_HEADLESS = os.environ.get('SCRAPE_HEADLESS', 'true').lower() in ('1', 'true', 'yes')
SCRAPE_EXPORT_DIR = 'scrape-jobs'

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'simple': {
            'format': '[{asctime}] {levelname} {name}: {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'simple',
        },
    },
    'loggers': {
        'scrape': {
            'handlers': ['console'],
            'level': os.environ.get('SCRAPE_LOG_LEVEL', 'INFO'),
            'propagate': False,
        },
    },
}
