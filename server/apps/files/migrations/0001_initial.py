import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='File',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(help_text='Stored name: {epoch_ms}-{original_name}', max_length=255)),
                ('size', models.BigIntegerField(help_text='File size in bytes')),
                ('mime_type', models.CharField(help_text='MIME type declared by the uploader', max_length=255)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='files', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'File',
                'verbose_name_plural': 'Files',
                'ordering': ['-created_at', '-id'],
                'indexes': [models.Index(fields=['user', '-created_at'], name='files_user_recent_idx')],
                'constraints': [
                    models.UniqueConstraint(fields=('user', 'name'), name='files_user_name_unique'),
                    models.CheckConstraint(condition=models.Q(('size__gte', 0)), name='files_size_non_negative'),
                ],
            },
        ),
        migrations.CreateModel(
            name='OrphanedObject',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('key', models.CharField(help_text='Object key: {user_id}/{name}', max_length=1024, unique=True)),
                ('user_id', models.BigIntegerField(db_index=True)),
                ('reason', models.CharField(choices=[('upload_rollback', 'Upload rollback'), ('delete_cleanup', 'Delete cleanup')], max_length=32)),
                ('attempts', models.PositiveIntegerField(default=1, help_text='Failed removal attempts so far')),
                ('last_error', models.TextField(blank=True, default='')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('last_attempt_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Orphaned Object',
                'verbose_name_plural': 'Orphaned Objects',
                'ordering': ['created_at'],
            },
        ),
    ]
