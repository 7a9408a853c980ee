import logging
from datetime import timedelta

from celery import shared_task
from flask import current_app

logger = logging.getLogger(__name__)


@shared_task(name="semiwallet.workers.tasks.reconcile_pending_payments")
def reconcile_pending_payments(stale_after_minutes=None, limit=None):
    """
    Settle payments whose webhook never arrived.
    """
    config = current_app.config
    older_than = timedelta(minutes=stale_after_minutes or config["RECONCILE_STALE_AFTER_MINUTES"])
    limit = limit or config["RECONCILE_BATCH_SIZE"]

    engine = current_app.extensions["reconciliation_engine"]
    stats = engine.reconcile_pending_payments(older_than, limit)
    logger.info("Reconciliation task finished", extra=stats)
    return stats
