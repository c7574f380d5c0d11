from django.db import models, transaction


class ScrapeJob(models.Model):
    """카페 수집 작업 (큐에 쌓인 뒤 한 번에 하나씩 실행)"""
    QUEUED = 'QUEUED'
    RUNNING = 'RUNNING'
    SUCCESS = 'SUCCESS'
    FAILED = 'FAILED'
    CANCELLED = 'CANCELLED'

    STATUS_CHOICES = [
        (QUEUED, '대기'),
        (RUNNING, '실행중'),
        (SUCCESS, '완료'),
        (FAILED, '실패'),
        (CANCELLED, '취소'),
    ]
    TERMINAL_STATUSES = (SUCCESS, FAILED, CANCELLED)

    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=QUEUED, db_index=True, verbose_name='상태')
    keywords = models.JSONField(default=list, verbose_name='키워드')
    cafes = models.JSONField(default=list, verbose_name='카페')  # [{"cafeId": ..., "cafeName": ...}]
    include_words = models.JSONField(default=list, blank=True, verbose_name='포함단어')
    exclude_words = models.JSONField(default=list, blank=True, verbose_name='제외단어')
    from_date = models.DateField(null=True, blank=True, verbose_name='시작일')
    to_date = models.DateField(null=True, blank=True, verbose_name='종료일')
    min_view_count = models.IntegerField(null=True, blank=True, verbose_name='최소조회수')
    min_comment_count = models.IntegerField(null=True, blank=True, verbose_name='최소댓글수')
    use_auto_filter = models.BooleanField(default=False, verbose_name='자동필터')
    max_posts = models.IntegerField(default=100, verbose_name='최대수집수')
    result_count = models.IntegerField(default=0, verbose_name='저장건수')
    sheet_synced = models.IntegerField(default=0, verbose_name='시트동기화건수')
    result_path = models.CharField(max_length=512, default='', blank=True, verbose_name='백업파일')
    error_message = models.TextField(null=True, blank=True, verbose_name='오류')
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    started_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'scrape_job'
        verbose_name = '수집작업'
        ordering = ['created_at', 'id']

    def __str__(self):
        return f"ScrapeJob({self.id}, {self.status})"

    @property
    def is_terminal(self):
        return self.status in self.TERMINAL_STATUSES

    def cafe_pairs(self):
        """(cafeId, cafeName) 목록. 이름이 없으면 cafeId로 대체"""
        pairs = []
        for cafe in self.cafes or []:
            cafe_id = str(cafe.get('cafeId') or '').strip()
            if not cafe_id:
                continue
            pairs.append((cafe_id, str(cafe.get('cafeName') or '').strip() or cafe_id))
        return pairs


class ScrapePostManager(models.Manager):

    def create_if_absent(self, content_hash, **fields):
        """content_hash 기준 insert-if-absent

        unique 제약 + get_or_create로 처리하므로 read-then-write 경합이 없다.
        Returns:
            (post, created) 튜플. 이미 있으면 기존 row와 False
        """
        with transaction.atomic():
            return self.get_or_create(content_hash=content_hash, defaults=fields)


class ScrapePost(models.Model):
    """수집된 게시글 (본문 해시로 전역 중복 제거)"""
    job = models.ForeignKey(ScrapeJob, on_delete=models.CASCADE, related_name='posts')
    source_url = models.CharField(max_length=1024, default='', verbose_name='url')
    cafe_id = models.CharField(max_length=256, default='', verbose_name='카페ID')
    cafe_name = models.CharField(max_length=256, default='', verbose_name='카페명')
    keyword = models.CharField(max_length=256, default='', verbose_name='키워드')
    board_name = models.CharField(max_length=256, default='', blank=True, verbose_name='게시판')
    title = models.CharField(max_length=1024, default='', verbose_name='제목')
    author_name = models.CharField(max_length=256, default='', verbose_name='작성자')
    published_at = models.DateTimeField(null=True, blank=True, verbose_name='작성일시')
    view_count = models.IntegerField(default=0, verbose_name='조회수')
    like_count = models.IntegerField(default=0, verbose_name='좋아요수')
    comment_count = models.IntegerField(default=0, verbose_name='댓글수')
    content_text = models.TextField(default='', verbose_name='본문')
    content_hash = models.CharField(max_length=64, unique=True, verbose_name='본문해시')
    raw_html = models.TextField(default='', blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = ScrapePostManager()

    class Meta:
        db_table = 'scrape_post'
        verbose_name = '수집게시글'


class ScrapeComment(models.Model):
    post = models.ForeignKey(ScrapePost, on_delete=models.CASCADE, related_name='comments')
    author_name = models.CharField(max_length=256, default='', blank=True, verbose_name='작성자')
    body = models.TextField(default='', verbose_name='내용')
    like_count = models.IntegerField(default=0, verbose_name='좋아요수')
    written_at = models.DateTimeField(null=True, blank=True, verbose_name='작성일시')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'scrape_comment'
        verbose_name = '수집댓글'


class Setting(models.Model):
    """키/값 저장소 (진행상황 문서, 취소 플래그)"""
    key = models.CharField(max_length=256, unique=True)
    value = models.JSONField(null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'setting'
