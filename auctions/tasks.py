# auctions/tasks.py
import logging

from celery import shared_task
from auctions.services import activate_due_auctions, close_due_auctions

logger = logging.getLogger(__name__)


@shared_task
def activate_due_auctions_task():
    activated = activate_due_auctions()
    if activated:
        logger.info("Activated %s auctions", activated)
    return activated


@shared_task
def close_due_auctions_task():
    closed = close_due_auctions()
    if closed:
        logger.info("Closed %s auctions", closed)
    return closed
