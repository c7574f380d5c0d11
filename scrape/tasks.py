"""
Celery 태스크 - 수집 큐 스케줄러
beat가 5초마다 process_scrape_queue를 호출하고, 한 번에 작업 1건만 실행한다.
수집 로직은 scrape/crawler.py
"""
import logging
import uuid

from celery import shared_task
from django.conf import settings

from scrape.crawler import run_scrape_job
from scrape.models import ScrapeJob
from scrape.utils import get_redis_connection


logger = logging.getLogger(__name__)

QUEUE_LEASE_KEY = 'scrape_queue_lease'

# 토큰이 일치할 때만 삭제 (다른 워커가 새로 잡은 lease를 지우지 않도록)
RELEASE_LEASE_SCRIPT = """
if redis.call('get', KEYS[1]) == ARGV[1] then
    return redis.call('del', KEYS[1])
end
return 0
"""


def acquire_queue_lease(r, token):
    return bool(r.set(QUEUE_LEASE_KEY, token, nx=True, ex=settings.SCRAPE_QUEUE_LEASE_TTL))


def release_queue_lease(r, token):
    r.eval(RELEASE_LEASE_SCRIPT, 1, QUEUE_LEASE_KEY, token)


def next_queued_job():
    """가장 오래된 QUEUED 작업 (생성순 FIFO)"""
    return ScrapeJob.objects.filter(status=ScrapeJob.QUEUED).order_by('created_at', 'id').first()


@shared_task(acks_late=False, ignore_result=False)
def process_scrape_queue(**kwargs):
    """큐 1틱: 실행 중인 작업이 없으면 가장 오래된 대기 작업을 끝까지 실행"""
    r = get_redis_connection()
    token = uuid.uuid4().hex
    if not acquire_queue_lease(r, token):
        return {"message": "LEASE_HELD"}

    try:
        if ScrapeJob.objects.filter(status=ScrapeJob.RUNNING).exists():
            return {"message": "JOB_RUNNING"}

        job = next_queued_job()
        if job is None:
            return {"message": "NO_QUEUED_JOB"}

        logger.info(f"[큐] job={job.id} 실행")
        try:
            status = run_scrape_job(job.id)
        except Exception:
            # 종료 상태 기록은 실행기가 이미 했으므로 여기서는 로그만 남긴다
            logger.exception(f"[큐] job={job.id} 실행 중 예외")
            return {"message": "JOB_FAILED", "job_id": job.id}

        if status is None:
            return {"message": "CLAIM_LOST", "job_id": job.id}
        return {"message": "JOB_FINISHED", "job_id": job.id, "status": status}
    finally:
        release_queue_lease(r, token)
