from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='ScrapeJob',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('status', models.CharField(choices=[('QUEUED', '대기'), ('RUNNING', '실행중'), ('SUCCESS', '완료'), ('FAILED', '실패'), ('CANCELLED', '취소')], db_index=True, default='QUEUED', max_length=16, verbose_name='상태')),
                ('keywords', models.JSONField(default=list, verbose_name='키워드')),
                ('cafes', models.JSONField(default=list, verbose_name='카페')),
                ('include_words', models.JSONField(blank=True, default=list, verbose_name='포함단어')),
                ('exclude_words', models.JSONField(blank=True, default=list, verbose_name='제외단어')),
                ('from_date', models.DateField(blank=True, null=True, verbose_name='시작일')),
                ('to_date', models.DateField(blank=True, null=True, verbose_name='종료일')),
                ('min_view_count', models.IntegerField(blank=True, null=True, verbose_name='최소조회수')),
                ('min_comment_count', models.IntegerField(blank=True, null=True, verbose_name='최소댓글수')),
                ('use_auto_filter', models.BooleanField(default=False, verbose_name='자동필터')),
                ('max_posts', models.IntegerField(default=100, verbose_name='최대수집수')),
                ('result_count', models.IntegerField(default=0, verbose_name='저장건수')),
                ('sheet_synced', models.IntegerField(default=0, verbose_name='시트동기화건수')),
                ('result_path', models.CharField(blank=True, default='', max_length=512, verbose_name='백업파일')),
                ('error_message', models.TextField(blank=True, null=True, verbose_name='오류')),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('started_at', models.DateTimeField(blank=True, null=True)),
                ('completed_at', models.DateTimeField(blank=True, null=True)),
            ],
            options={
                'verbose_name': '수집작업',
                'db_table': 'scrape_job',
                'ordering': ['created_at', 'id'],
            },
        ),
        migrations.CreateModel(
            name='Setting',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('key', models.CharField(max_length=256, unique=True)),
                ('value', models.TextField(default='')),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'setting',
            },
        ),
        migrations.CreateModel(
            name='ScrapePost',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('source_url', models.CharField(default='', max_length=1024, verbose_name='url')),
                ('cafe_id', models.CharField(default='', max_length=256, verbose_name='카페ID')),
                ('cafe_name', models.CharField(default='', max_length=256, verbose_name='카페명')),
                ('keyword', models.CharField(default='', max_length=256, verbose_name='키워드')),
                ('title', models.CharField(default='', max_length=1024, verbose_name='제목')),
                ('author_name', models.CharField(default='', max_length=256, verbose_name='작성자')),
                ('published_at', models.DateTimeField(blank=True, null=True, verbose_name='작성일시')),
                ('view_count', models.IntegerField(default=0, verbose_name='조회수')),
                ('like_count', models.IntegerField(default=0, verbose_name='좋아요수')),
                ('comment_count', models.IntegerField(default=0, verbose_name='댓글수')),
                ('content_text', models.TextField(default='', verbose_name='본문')),
                ('content_hash', models.CharField(max_length=64, unique=True, verbose_name='본문해시')),
                ('raw_html', models.TextField(blank=True, default='')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('job', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='posts', to='scrape.scrapejob')),
            ],
            options={
                'verbose_name': '수집게시글',
                'db_table': 'scrape_post',
            },
        ),
        migrations.CreateModel(
            name='ScrapeComment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('author_name', models.CharField(blank=True, default='', max_length=256, verbose_name='작성자')),
                ('body', models.TextField(default='', verbose_name='내용')),
                ('like_count', models.IntegerField(default=0, verbose_name='좋아요수')),
                ('written_at', models.DateTimeField(blank=True, null=True, verbose_name='작성일시')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('post', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='comments', to='scrape.scrapepost')),
            ],
            options={
                'verbose_name': '수집댓글',
                'db_table': 'scrape_comment',
            },
        ),
    ]
