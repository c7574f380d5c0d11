import os
from celery import Celery


os.environ.setdefault(
    "DJANGO_SETTINGS_MODULE",
    "main.settings.prod",
)

app = Celery('main')

app.config_from_object(
    "django.conf:settings",
    namespace="CELERY",
)

app.autodiscover_tasks()
app.conf.timezone = 'Asia/Seoul'

# 큐 폴링: 5초마다 대기 작업 1건을 꺼내 실행 (실행 중이면 건너뜀)
app.conf.beat_schedule = {
    "scrape-queue-tick": {
        "task": "scrape.tasks.process_scrape_queue",
        "schedule": float(os.environ.get('SCRAPE_QUEUE_INTERVAL', '5')),
        "options": {"expires": 5},
    }
}

# 태스크별 큐 분리
app.conf.task_routes = {
    'scrape.tasks.process_scrape_queue': {'queue': 'scrape'},
}

app.conf.result_expires = 86400
