"""Flask CLI commands: `flask --app wsgi <command>` or `python manage.py <command>`."""

import click

from semiwallet.extensions import db


def register_commands(app):
    @app.cli.command("init-db")
    def init_db():
        """Create all database tables"""
        db.create_all()
        click.echo("Database initialized successfully!")

    @app.cli.command("drop-db")
    @click.confirmation_option(prompt="Are you sure you want to drop all tables?")
    def drop_db():
        """Drop all database tables"""
        db.drop_all()
        click.echo("Database dropped successfully!")

    @app.cli.command("seed-plans")
    def seed_plans():
        """Insert the default subscription plans"""
        from semiwallet.services.plan_service import seed_default_plans

        created = seed_default_plans(db.session)
        click.echo(f"Seeded {created} plan(s).")

    @app.cli.command("reconcile")
    @click.option("--stale-after", default=None, type=int, help="Minutes a payment must be pending.")
    @click.option("--limit", default=None, type=int, help="Maximum payments to check.")
    def reconcile(stale_after, limit):
        """Settle pending payments whose webhook never arrived"""
        from semiwallet.workers.tasks import reconcile_pending_payments

        stats = reconcile_pending_payments.run(stale_after, limit)
        click.echo(f"checked={stats['checked']} resolved={stats['resolved']} errors={stats['errors']}")
