# Generated manually for the logbook app

import uuid
from decimal import Decimal
from django.conf import settings
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Bundle',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('filed_date', models.DateField()),
                ('status', models.CharField(choices=[('submitted', 'Submitted'), ('paid', 'Paid')], default='submitted', max_length=20)),
                ('notes', models.TextField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='bundles', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'bundles',
                'ordering': ['-filed_date', '-created_at'],
                'indexes': [
                    models.Index(fields=['user'], name='bundles_user_idx'),
                    models.Index(fields=['user', 'status'], name='bundles_user_status_idx'),
                    models.Index(fields=['filed_date'], name='bundles_filed_date_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='LogEntry',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('hours', models.DecimalField(decimal_places=2, max_digits=5, validators=[MinValueValidator(Decimal('0.00')), MaxValueValidator(Decimal('24.00'))])),
                ('start', models.DateTimeField()),
                ('end', models.DateTimeField()),
                ('note', models.CharField(blank=True, max_length=500)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('bundle', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='log_entries', to='logbook.bundle')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='log_entries', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'log_entries',
                'verbose_name_plural': 'log entries',
                'ordering': ['start', 'created_at', 'id'],
                'indexes': [
                    models.Index(fields=['user'], name='log_entries_user_idx'),
                    models.Index(fields=['user', 'bundle'], name='log_entries_user_bundle_idx'),
                    models.Index(fields=['start'], name='log_entries_start_idx'),
                ],
            },
        ),
    ]
