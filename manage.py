"""Management script for database migrations and other tasks"""

from flask.cli import FlaskGroup

from semiwallet import create_app

# `flask db ...` (Flask-Migrate) and the semiwallet commands are attached by create_app
cli = FlaskGroup(create_app=create_app)


if __name__ == "__main__":
    cli()
