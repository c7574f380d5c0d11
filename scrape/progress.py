"""
작업 진행상황 문서 + 취소 플래그

진행상황은 작업당 JSON 문서 1개를 Setting 테이블에 덮어쓴다 (append 로그 아님).
대시보드는 이 문서를 폴링하며, 실행 중인데 셀의 updatedAt이 90초 이상 지나면
멈춘 것으로 간주한다 (파이프라인에서 강제하지 않음).
"""
from datetime import datetime, timedelta

from scrape.models import Setting
from scrape.utils import progress_cell_key


PROGRESS_KEY = 'scrapeJobProgress:{job_id}'
CANCEL_KEY = 'scrapeJobCancel:{job_id}'

STALE_AFTER = timedelta(seconds=90)

CELL_STATUSES = ('searching', 'parsing', 'done', 'failed', 'skipped')


def _now_iso():
    return datetime.now().isoformat(timespec='seconds')


def _read_document(key):
    row = Setting.objects.filter(key=key).first()
    if row is None or not isinstance(row.value, dict):
        return None
    return row.value


def _write_document(key, value):
    Setting.objects.update_or_create(key=key, defaults={'value': value})


def get_progress(job_id):
    return _read_document(PROGRESS_KEY.format(job_id=job_id))


def is_cell_stale(cell, now=None):
    """읽기 측 판단용: 셀이 90초 이상 갱신되지 않았는지"""
    updated_at = (cell or {}).get('updatedAt')
    if not updated_at:
        return False
    now = now or datetime.now()
    return now - datetime.fromisoformat(updated_at) > STALE_AFTER


def mark_cancel_requested(job_id):
    """대시보드 취소 요청 시 진행 문서에 표시만 남긴다 (단계 전환은 실행기가 함)"""
    key = PROGRESS_KEY.format(job_id=job_id)
    document = _read_document(key) or {'jobId': str(job_id), 'matrix': {}}
    document['message'] = 'cancel requested'
    document['updatedAt'] = _now_iso()
    _write_document(key, document)


# ============================================================
# 취소 플래그
# ============================================================

def request_cancel(job_id):
    Setting.objects.update_or_create(
        key=CANCEL_KEY.format(job_id=job_id),
        defaults={'value': True},
    )


def is_cancel_requested(job_id):
    row = Setting.objects.filter(key=CANCEL_KEY.format(job_id=job_id)).first()
    return row is not None and row.value is True


def clear_cancel(job_id):
    Setting.objects.filter(key=CANCEL_KEY.format(job_id=job_id)).delete()


# ============================================================
# 진행상황 기록기
# ============================================================

class ProgressReporter:
    """작업 1건의 진행상황 문서를 갱신한다. 모든 갱신은 문서 전체 덮어쓰기"""

    def __init__(self, job_id, pages_target=4):
        self.job_id = job_id
        self.pages_target = pages_target
        self.key = PROGRESS_KEY.format(job_id=job_id)
        self.document = {
            'jobId': str(job_id),
            'stage': 'STARTING',
            'message': '',
            'cafeId': '',
            'keyword': '',
            'collected': 0,
            'dbSynced': 0,
            'sheetSynced': 0,
            'updatedAt': _now_iso(),
            'matrix': {},
        }

    def save(self):
        self.document['updatedAt'] = _now_iso()
        _write_document(self.key, self.document)

    def set_stage(self, stage, message='', cafe_id=None, keyword=None):
        self.document['stage'] = stage
        self.document['message'] = message
        if cafe_id is not None:
            self.document['cafeId'] = cafe_id
        if keyword is not None:
            self.document['keyword'] = keyword
        self.save()

    def set_totals(self, **totals):
        """collected / dbSynced / sheetSynced 갱신"""
        for name, value in totals.items():
            self.document[name] = value
        self.save()

    def _cell(self, cafe_id, keyword):
        matrix = self.document['matrix']
        key = progress_cell_key(cafe_id, keyword)
        if key not in matrix:
            matrix[key] = {
                'status': 'searching',
                'pagesScanned': 0,
                'pagesTarget': self.pages_target,
                'fetchedRows': 0,
                'totalResults': 0,
                'collected': 0,
                'skipped': 0,
                'filteredOut': 0,
                'updatedAt': _now_iso(),
            }
        return matrix[key]

    def get_cell(self, cafe_id, keyword):
        return self.document['matrix'].get(progress_cell_key(cafe_id, keyword))

    def update_cell(self, cafe_id, keyword, **fields):
        """같은 값으로 여러 번 호출해도 결과가 같다"""
        status = fields.get('status')
        if status is not None and status not in CELL_STATUSES:
            raise ValueError(f"알 수 없는 셀 상태: {status}")
        cell = self._cell(cafe_id, keyword)
        cell.update(fields)
        cell['updatedAt'] = _now_iso()
        self.save()
        return cell

    def increment(self, cafe_id, keyword, field, amount=1):
        cell = self._cell(cafe_id, keyword)
        cell[field] = cell.get(field, 0) + amount
        cell['updatedAt'] = _now_iso()
        self.save()
        return cell
