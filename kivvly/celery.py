"""
Celery application for Kivvly.

Only mail delivery runs in the background: verification and password reset
messages go to the ``emails`` queue; everything else uses ``default``.
Tasks run eagerly under ``kivvly.settings_test``.
"""

import os

from celery import Celery
from kombu import Exchange, Queue

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'kivvly.settings')

app = Celery('kivvly')
app.config_from_object('django.conf:settings', namespace='CELERY')
app.autodiscover_tasks()

app.conf.task_queues = (
    Queue('default', Exchange('default', type='direct'), routing_key='default'),
    Queue('emails', Exchange('emails', type='direct'), routing_key='emails'),
)
app.conf.task_default_queue = 'default'

app.conf.task_routes = {
    'accounts.tasks.send_*': {'queue': 'emails', 'routing_key': 'emails'},
}

# Per-worker mail rate
app.conf.task_annotations = {
    'accounts.tasks.send_verification_email': {'rate_limit': '100/m'},
    'accounts.tasks.send_password_reset_email': {'rate_limit': '100/m'},
}

# Redeliver mail tasks of a lost worker
app.conf.task_acks_late = True
app.conf.task_reject_on_worker_lost = True
app.conf.result_expires = 86400
