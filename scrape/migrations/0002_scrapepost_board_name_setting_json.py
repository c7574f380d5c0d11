from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('scrape', '0001_initial'),
    ]

    operations = [
        migrations.AddField(
            model_name='scrapepost',
            name='board_name',
            field=models.CharField(blank=True, default='', max_length=256, verbose_name='게시판'),
        ),
        migrations.AlterField(
            model_name='setting',
            name='value',
            field=models.JSONField(blank=True, null=True),
        ),
    ]
