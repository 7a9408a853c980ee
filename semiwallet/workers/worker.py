"""
Worker entrypoint:

    celery -A semiwallet.workers.worker worker --loglevel=info
    celery -A semiwallet.workers.worker beat
"""

import os

from dotenv import load_dotenv

load_dotenv()

from semiwallet import create_app  # noqa: E402

flask_app = create_app(os.getenv("APP_ENV", "production"))
celery = flask_app.extensions["celery"]
