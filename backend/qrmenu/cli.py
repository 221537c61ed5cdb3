# Overview: Flask CLI command groups for bootstrap, users, and maintenance.

# backend/qrmenu/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to "qrmenu:create_app".
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap:
# - python -m flask system init
#   Idempotent: creates roles and default plans (free, standard).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Users:
# - python -m flask users create --email owner@example.com --password "Password123!" --role ROLE_RESTAURANT_OWNER --restaurant-slug cafe
#   Create a user (prompts if options are omitted).
# - python -m flask users create-super-admin --email admin@example.com --password "Password123!"
#   Create a cross-tenant super-admin.
# - python -m flask users list
#   List all users with roles and active status.
#
# Maintenance:
# - python -m flask media clean-orphaned --days 30
#   Hard-delete media soft-deleted more than N days ago (all restaurants).
# - python -m flask maintenance cleanup-security-events --retention-days 90
#   Delete security events older than the retention window.

from decimal import Decimal

import click
from flask.cli import with_appcontext

from .errors import ConflictError
from .extensions import db
from .models import Plan, Restaurant, Role, User
from .permissions import ROLE_DEFINITIONS, ROLE_EDITOR, ROLE_RESTAURANT_OWNER, ROLE_SUPER_ADMIN
from .services import maintenance_service, media_service
from .services.auth_service import PasswordValidationError, create_user
from .services.tenant_service import unrestricted


# (code, name, max_restaurants, yearly_price)
DEFAULT_PLANS = [
    ("free", "Free", 1, "0.00"),
    ("standard", "Standard", 3, "1200.00"),
]


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """
    Initialize roles and default plans. Safe to run repeatedly.
    """
    click.echo("START Initializing QR menu system...")

    for name, description in ROLE_DEFINITIONS:
        if db.session.query(Role).filter_by(name=name).first() is None:
            db.session.add(Role(name=name, description=description))
            click.echo(f"PASS Created role {name}")

    for code, name, max_restaurants, yearly_price in DEFAULT_PLANS:
        if db.session.query(Plan).filter_by(code=code).first() is None:
            db.session.add(Plan(code=code, name=name, max_restaurants=max_restaurants, yearly_price=Decimal(yearly_price)))
            click.echo(f"PASS Created plan {code}")

    db.session.commit()
    click.echo("DONE System initialized.")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """DANGER: Drop all tables and recreate schema."""
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()
    click.echo("DONE Database reset.")


@click.group('users')
def users_group():
    """User inspection and bootstrap commands."""


@users_group.command('create')
@click.option('--email', prompt=True, help='Email address')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--role', type=click.Choice([ROLE_RESTAURANT_OWNER, ROLE_EDITOR]), prompt=True, help='Role')
@click.option('--restaurant-slug', help='Restaurant the user works in')
@click.option('--first-name', default='', help='First name')
@click.option('--last-name', default='', help='Last name')
@with_appcontext
def create_user_cli(email, password, role, restaurant_slug, first_name, last_name):
    """
    Create a tenant user (owner or editor).

    Password must meet strength requirements:
    8+ chars, uppercase, lowercase, digit, special char.
    """
    restaurant = None
    if restaurant_slug:
        restaurant = db.session.query(Restaurant).filter_by(slug=restaurant_slug).first()
        if restaurant is None:
            click.echo(f"FAIL Restaurant '{restaurant_slug}' not found")
            return

    try:
        user = create_user(
            email=email,
            password=password,
            first_name=first_name,
            last_name=last_name,
            role_names=[role],
            restaurant=restaurant,
            customer_account_id=restaurant.customer_account_id if restaurant is not None else None,
        )
    except PasswordValidationError as e:
        click.echo(f"FAIL Password validation failed: {e}")
        click.echo("Requirements: 8+ chars, uppercase, lowercase, digit, special char")
        return
    except (ConflictError, ValueError) as e:
        click.echo(f"FAIL Failed to create user: {e}")
        return

    click.echo(f"PASS Created user {user.email} with role {role}")
    if restaurant is not None:
        click.echo(f"     Restaurant: {restaurant.name} (ID: {restaurant.id})")


@users_group.command('create-super-admin')
@click.option('--email', prompt=True, help='Email address')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@with_appcontext
def create_super_admin_cli(email, password):
    """Create a cross-tenant super-admin (no restaurant)."""
    try:
        user = create_user(email=email, password=password, role_names=[ROLE_SUPER_ADMIN])
    except PasswordValidationError as e:
        click.echo(f"FAIL Password validation failed: {e}")
        return
    except (ConflictError, ValueError) as e:
        click.echo(f"FAIL Failed to create super-admin: {e}")
        click.echo("Run 'python -m flask system init' first if roles are missing.")
        return

    click.echo(f"PASS Created super-admin {user.email} (ID: {user.id})")


@users_group.command('list')
@with_appcontext
def list_users():
    """List all users with their roles."""
    users = db.session.query(User).order_by(User.id).all()

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "=" * 100)
    click.echo(f"{'ID':<5} {'Email':<35} {'Restaurant':<11} {'Active':<8} {'Roles'}")
    click.echo("=" * 100)

    for user in users:
        active_str = "Yes" if user.is_active and user.deleted_at is None else "No"
        restaurant_str = str(user.restaurant_id) if user.restaurant_id is not None else "-"
        click.echo(f"{user.id:<5} {user.email:<35} {restaurant_str:<11} {active_str:<8} {', '.join(user.get_roles())}")

    click.echo("=" * 100 + "\n")


@click.group('media')
def media_group():
    """Media housekeeping commands."""


@media_group.command('clean-orphaned')
@click.option('--days', type=int, default=30, show_default=True, help='Days since deletion')
@with_appcontext
def clean_orphaned_media_cli(days):
    """Hard-delete media soft-deleted more than --days ago."""
    purged = media_service.purge_deleted_media(unrestricted(), days)
    click.echo(f"Purged {purged} media deleted more than {days} days ago.")


@click.group('maintenance')
def maintenance_group():
    """Maintenance commands."""


@maintenance_group.command('cleanup-security-events')
@click.option('--retention-days', type=int, default=90, show_default=True)
@with_appcontext
def cleanup_security_events_cli(retention_days):
    """
    Cleanup old security events.

    Default retention: 90 days.
    """
    deleted = maintenance_service.cleanup_security_events(retention_days=retention_days)
    click.echo(f"Deleted {deleted} security events older than {retention_days} days.")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(media_group)
    app.cli.add_command(maintenance_group)
