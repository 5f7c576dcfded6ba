import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='GuestLink',
            fields=[
                ('id', models.CharField(
                    max_length=10,
                    primary_key=True,
                    serialize=False,
                )),
                ('label', models.CharField(
                    blank=True,
                    max_length=120,
                    null=True,
                )),
                ('max_file_bytes', models.PositiveBigIntegerField(
                    blank=True,
                    help_text='Per-file size limit in bytes',
                    null=True,
                )),
                ('max_file_lifetime_days', models.PositiveIntegerField(
                    blank=True,
                    help_text='Lifetime of uploaded files in days',
                    null=True,
                )),
                ('max_file_uploads', models.PositiveIntegerField(
                    blank=True,
                    help_text='Total number of files the link accepts',
                    null=True,
                )),
                ('url_expires', models.DateTimeField(
                    blank=True,
                    help_text='After this time the link rejects uploads',
                    null=True,
                )),
                ('created_time', models.DateTimeField(
                    default=django.utils.timezone.now,
                )),
                ('upload_count', models.PositiveIntegerField(default=0)),
            ],
            options={
                'verbose_name': 'Guest Link',
                'verbose_name_plural': 'Guest Links',
                'ordering': ['-created_time'],
            },
        ),
    ]
