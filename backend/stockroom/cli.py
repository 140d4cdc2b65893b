# Overview: Flask CLI command groups for bootstrap and maintenance.

# backend/stockroom/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap:
# - python -m flask system init-db
#   Create all tables for the SQL backend (use `flask db upgrade` for migrated deployments).
#
# Users:
# - python -m flask users create --username ADMIN --password ADMIN1234
#   Register a user (prompts if options are omitted).
#
# Maintenance:
# - python -m flask news sweep
#   Delete business news whose expiry has passed. Safe to schedule (cron).
# - python -m flask sessions cleanup
#   Delete expired or revoked sessions older than 30 days.

import click
from flask.cli import with_appcontext

from .extensions import db
from .services import auth_service, news_service, session_service
from .stores import get_record_store
from .validation import DuplicateKeyError, ValidationError, validate_user_payload


@click.group('system')
def system_group():
    """System bootstrap commands."""


@system_group.command('init-db')
@with_appcontext
def init_db_command():
    """Create all tables (SQL backend only)."""
    store = get_record_store()
    if store.backend_name != "sql":
        click.echo(f"Backend '{store.backend_name}' keeps no schema; nothing to do.")
        return
    db.create_all()
    click.echo("Database tables created.")


@click.group('users')
def users_group():
    """User bootstrap commands."""


@users_group.command('create')
@click.option('--username', prompt=True)
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True)
@with_appcontext
def create_user_command(username, password):
    """Register a user with the same rules as the API."""
    try:
        data = validate_user_payload({"username": username, "password": password})
        user = auth_service.register_user(username=data["username"], password=data["password"])
    except ValidationError as e:
        for field, message in e.errors:
            click.echo(f"{field}: {message}", err=True)
        raise click.exceptions.Exit(1)
    except DuplicateKeyError as e:
        click.echo(str(e), err=True)
        raise click.exceptions.Exit(1)
    click.echo(f"Created user id={user.id} username={user.username}")


@click.group('news')
def news_group():
    """Business news maintenance."""


@news_group.command('sweep')
@with_appcontext
def sweep_news_command():
    """Delete expired business news."""
    removed = news_service.cleanup_expired_news()
    click.echo(f"Removed {removed} expired business news item(s).")


@click.group('sessions')
def sessions_group():
    """Session maintenance."""


@sessions_group.command('cleanup')
@with_appcontext
def cleanup_sessions_command():
    """Delete expired or revoked sessions older than 30 days."""
    removed = session_service.cleanup_expired_sessions()
    click.echo(f"Removed {removed} session(s).")


def register_commands(app):
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(news_group)
    app.cli.add_command(sessions_group)
