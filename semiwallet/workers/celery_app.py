from celery import Celery, Task


def init_celery(app):
    """
    Create the Celery app for a Flask app: broker, eager mode and beat
    schedule. Every task body runs inside that Flask app's context.
    """

    class ContextTask(Task):
        abstract = True

        def __call__(self, *args, **kwargs):
            with app.app_context():
                return self.run(*args, **kwargs)

    celery = Celery(app.import_name, task_cls=ContextTask)
    celery.conf.update(
        broker_url=app.config["REDIS_URL"],
        result_backend=app.config["REDIS_URL"],
        task_serializer="json",
        accept_content=["json"],
        result_serializer="json",
        timezone="UTC",
        enable_utc=True,
        worker_prefetch_multiplier=1,
        task_acks_late=True,
        task_always_eager=app.config.get("CELERY_TASK_ALWAYS_EAGER", False),
        task_eager_propagates=app.config.get("CELERY_TASK_ALWAYS_EAGER", False),
        beat_schedule={
            "reconcile-pending-payments": {
                "task": "semiwallet.workers.tasks.reconcile_pending_payments",
                "schedule": float(app.config.get("RECONCILE_INTERVAL_SECONDS", 300)),
            },
        },
    )
    celery.set_default()

    # registers the shared tasks
    import semiwallet.workers.tasks  # noqa: F401

    app.extensions["celery"] = celery
    return celery
