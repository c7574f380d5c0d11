"""
수집 작업 API
대시보드가 작업을 등록하고 진행상황 문서를 폴링한다.
"""
from datetime import date, datetime
from typing import List, Optional

from ninja import Router, Schema
from ninja.errors import HttpError
from django.shortcuts import get_object_or_404

from scrape import progress
from scrape.models import ScrapeJob


jobs_router = Router()


class CafeIn(Schema):
    cafeId: str
    cafeName: str = ''


class JobIn(Schema):
    keywords: List[str]
    cafes: List[CafeIn]
    includeWords: List[str] = []
    excludeWords: List[str] = []
    fromDate: Optional[date] = None
    toDate: Optional[date] = None
    minViewCount: Optional[int] = None
    minCommentCount: Optional[int] = None
    useAutoFilter: bool = False
    maxPosts: int = 100


class JobOut(Schema):
    id: int
    status: str
    keywords: list
    cafes: list
    maxPosts: int
    resultCount: int
    sheetSynced: int
    resultPath: str
    errorMessage: Optional[str] = None
    createdAt: datetime
    startedAt: Optional[datetime] = None
    completedAt: Optional[datetime] = None


def _job_out(job):
    return {
        'id': job.id,
        'status': job.status,
        'keywords': job.keywords,
        'cafes': job.cafes,
        'maxPosts': job.max_posts,
        'resultCount': job.result_count,
        'sheetSynced': job.sheet_synced,
        'resultPath': job.result_path,
        'errorMessage': job.error_message,
        'createdAt': job.created_at,
        'startedAt': job.started_at,
        'completedAt': job.completed_at,
    }


def _cancel(job):
    """QUEUED는 바로 취소, RUNNING은 플래그만 세우고 실행기가 종료 상태를 기록한다"""
    if job.status == ScrapeJob.QUEUED:
        rows_updated = ScrapeJob.objects.filter(id=job.id, status=ScrapeJob.QUEUED).update(
            status=ScrapeJob.CANCELLED,
            completed_at=datetime.now(),
            error_message='cancelled by user (queued)',
        )
        if rows_updated:
            progress.clear_cancel(job.id)
            return 'CANCELLED'
        job.refresh_from_db()

    if job.status == ScrapeJob.RUNNING:
        progress.request_cancel(job.id)
        progress.mark_cancel_requested(job.id)
        return 'CANCEL_REQUESTED'
    return None


@jobs_router.post("", auth=None, response={201: JobOut})
def create_job(request, payload: JobIn):
    """수집 작업 등록 (QUEUED)"""
    keywords = [k.strip() for k in payload.keywords if k.strip()]
    cafes = [
        {'cafeId': c.cafeId.strip(), 'cafeName': c.cafeName.strip() or c.cafeId.strip()}
        for c in payload.cafes if c.cafeId.strip()
    ]
    if not keywords:
        raise HttpError(400, "키워드를 1개 이상 입력해주세요.")
    if not cafes:
        raise HttpError(400, "카페를 1개 이상 선택해주세요.")
    if payload.maxPosts < 1:
        raise HttpError(400, "maxPosts는 1 이상이어야 합니다.")
    if payload.fromDate and payload.toDate and payload.fromDate > payload.toDate:
        raise HttpError(400, "시작일이 종료일보다 늦습니다.")

    job = ScrapeJob.objects.create(
        keywords=keywords,
        cafes=cafes,
        include_words=[w.strip() for w in payload.includeWords if w.strip()],
        exclude_words=[w.strip() for w in payload.excludeWords if w.strip()],
        from_date=payload.fromDate,
        to_date=payload.toDate,
        min_view_count=payload.minViewCount,
        min_comment_count=payload.minCommentCount,
        use_auto_filter=payload.useAutoFilter,
        max_posts=payload.maxPosts,
    )
    return 201, _job_out(job)


@jobs_router.get("/{job_id}", auth=None)
def get_job(request, job_id: int):
    """작업 상세 + 저장된 게시글/댓글"""
    job = get_object_or_404(ScrapeJob, id=job_id)
    posts = []
    for post in job.posts.prefetch_related('comments').order_by('-created_at'):
        posts.append({
            'id': post.id,
            'sourceUrl': post.source_url,
            'cafeId': post.cafe_id,
            'cafeName': post.cafe_name,
            'keyword': post.keyword,
            'boardName': post.board_name,
            'title': post.title,
            'authorName': post.author_name,
            'publishedAt': post.published_at.isoformat() if post.published_at else '',
            'viewCount': post.view_count,
            'likeCount': post.like_count,
            'commentCount': post.comment_count,
            'contentText': post.content_text,
            'comments': [
                {
                    'authorName': c.author_name,
                    'body': c.body,
                    'likeCount': c.like_count,
                    'writtenAt': c.written_at.isoformat() if c.written_at else '',
                }
                for c in post.comments.all()
            ],
        })
    data = _job_out(job)
    data['createdAt'] = job.created_at.isoformat()
    data['startedAt'] = job.started_at.isoformat() if job.started_at else None
    data['completedAt'] = job.completed_at.isoformat() if job.completed_at else None
    data['posts'] = posts
    return {"success": True, "data": data}


@jobs_router.get("/{job_id}/progress", auth=None)
def get_job_progress(request, job_id: int):
    job = get_object_or_404(ScrapeJob, id=job_id)
    document = progress.get_progress(job.id)
    if document is None:
        raise HttpError(404, "진행상황이 없습니다.")
    return {"success": True, "status": job.status, "data": document}


@jobs_router.post("/cancel-all", auth=None)
def cancel_all_jobs(request):
    """대기/실행 중인 작업 모두 취소"""
    result = {'cancelled': [], 'cancel_requested': []}
    for job in ScrapeJob.objects.filter(status__in=[ScrapeJob.QUEUED, ScrapeJob.RUNNING]):
        outcome = _cancel(job)
        if outcome == 'CANCELLED':
            result['cancelled'].append(job.id)
        elif outcome == 'CANCEL_REQUESTED':
            result['cancel_requested'].append(job.id)

    total = len(result['cancelled']) + len(result['cancel_requested'])
    return {
        "success": True,
        "cancelled": result['cancelled'],
        "cancelRequested": result['cancel_requested'],
        "message": f"{total}개 작업을 중단했습니다." if total else "활성 작업이 없습니다.",
    }


@jobs_router.post("/{job_id}/cancel", auth=None)
def cancel_job(request, job_id: int):
    job = get_object_or_404(ScrapeJob, id=job_id)
    outcome = _cancel(job)
    if outcome is None:
        raise HttpError(409, "이미 종료된 작업입니다.")
    return {"success": True, "result": outcome}
