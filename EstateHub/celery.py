import os
from celery import Celery

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'EstateHub.settings')

app = Celery('EstateHub')
app.config_from_object('django.conf:settings', namespace='CELERY')
app.autodiscover_tasks()

app.conf.beat_schedule = {
    'activate-due-auctions': {
        'task': 'auctions.tasks.activate_due_auctions_task',
        'schedule': 60.0,  # Every minute (in seconds)
    },
    'close-due-auctions': {
        'task': 'auctions.tasks.close_due_auctions_task',
        'schedule': 60.0,
    },
}
