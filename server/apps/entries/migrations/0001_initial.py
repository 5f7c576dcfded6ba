import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Entry',
            fields=[
                ('id', models.CharField(
                    help_text='Opaque random id, also the blob key',
                    max_length=10,
                    primary_key=True,
                    serialize=False,
                )),
                ('filename', models.CharField(max_length=255)),
                ('content_type', models.CharField(
                    default='application/octet-stream',
                    max_length=255,
                )),
                ('size', models.PositiveBigIntegerField(
                    help_text='Size in bytes',
                )),
                ('upload_time', models.DateTimeField(
                    default=django.utils.timezone.now,
                )),
                ('expiration_time', models.DateTimeField(
                    blank=True,
                    db_index=True,
                    help_text='Empty means the entry never expires',
                    null=True,
                )),
                ('note', models.CharField(
                    blank=True,
                    max_length=1000,
                    null=True,
                )),
                ('guest_link_id', models.CharField(
                    blank=True,
                    db_index=True,
                    max_length=10,
                    null=True,
                )),
            ],
            options={
                'verbose_name': 'Entry',
                'verbose_name_plural': 'Entries',
                'ordering': ['-upload_time'],
                'constraints': [
                    models.CheckConstraint(
                        condition=models.Q(size__gte=0),
                        name='entries_size_non_negative',
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name='DownloadEvent',
            fields=[
                ('id', models.BigAutoField(
                    auto_created=True,
                    primary_key=True,
                    serialize=False,
                    verbose_name='ID',
                )),
                ('entry_id', models.CharField(db_index=True, max_length=10)),
                ('downloaded_at', models.DateTimeField(
                    default=django.utils.timezone.now,
                )),
                ('ip', models.GenericIPAddressField(blank=True, null=True)),
                ('user_agent', models.CharField(
                    blank=True,
                    default='',
                    max_length=512,
                )),
            ],
            options={
                'verbose_name': 'Download Event',
                'verbose_name_plural': 'Download Events',
                'ordering': ['-downloaded_at'],
            },
        ),
        migrations.CreateModel(
            name='MultipartUpload',
            fields=[
                ('upload_id', models.CharField(
                    help_text='Issued by the blob store multipart API',
                    max_length=1024,
                    primary_key=True,
                    serialize=False,
                )),
                ('entry_id', models.CharField(
                    help_text='Pre-allocated id of the entry to create',
                    max_length=10,
                    unique=True,
                )),
                ('filename', models.CharField(max_length=255)),
                ('content_type', models.CharField(max_length=255)),
                ('size', models.PositiveBigIntegerField(
                    default=0,
                    help_text='Client declared size, never checked against parts',
                )),
                ('expiration_time', models.DateTimeField(
                    blank=True,
                    null=True,
                )),
                ('note', models.CharField(
                    blank=True,
                    max_length=1000,
                    null=True,
                )),
                ('created_time', models.DateTimeField(
                    default=django.utils.timezone.now,
                )),
            ],
            options={
                'verbose_name': 'Multipart Upload',
                'verbose_name_plural': 'Multipart Uploads',
                'ordering': ['-created_time'],
            },
        ),
        migrations.CreateModel(
            name='MultipartUploadPart',
            fields=[
                ('id', models.BigAutoField(
                    auto_created=True,
                    primary_key=True,
                    serialize=False,
                    verbose_name='ID',
                )),
                ('part_number', models.PositiveIntegerField()),
                ('etag', models.CharField(
                    help_text='Integrity token returned by the blob store',
                    max_length=255,
                )),
                ('upload', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='parts',
                    to='entries.multipartupload',
                )),
            ],
            options={
                'verbose_name': 'Multipart Upload Part',
                'verbose_name_plural': 'Multipart Upload Parts',
                'ordering': ['part_number'],
                'constraints': [
                    models.UniqueConstraint(
                        fields=('upload', 'part_number'),
                        name='multipart_parts_unique',
                    ),
                ],
            },
        ),
    ]
