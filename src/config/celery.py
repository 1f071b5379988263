"""
Aplicação Celery do backend de pedidos.

Lê as settings do Django com o prefixo ``CELERY_`` e descobre o ``tasks.py``
de cada módulo.  O beat agenda ``core.publish_outbox_events``, que drena o
outbox transacional para o barramento de eventos em processo.
"""

import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

app = Celery("orders")
app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()
