"""
수집 작업 API 라우터
- 작업 등록/조회 (/jobs)
- 진행상황 조회, 취소
"""
from ninja import Router
from .jobs import jobs_router


router = Router()

router.add_router("/jobs", jobs_router, tags=["Jobs"])
