"""
Pytest fixtures for QR menu backend tests.

Provides test database setup, two-restaurant tenant fixtures, a pinned
clock, bearer token helpers and the test client.
"""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from qrmenu import create_app
from qrmenu.enums import ProductStatus
from qrmenu.extensions import db
from qrmenu.models import (
    Category, CustomerAccount, CustomerSubscription, Plan, Product, Restaurant, Role, User,
)
from qrmenu.permissions import (
    ROLE_DEFINITIONS, ROLE_EDITOR, ROLE_RESTAURANT_OWNER, ROLE_SUPER_ADMIN, Principal,
)
from qrmenu.services.auth_service import hash_password
from qrmenu.time_utils import FixedClock


NOW = datetime(2026, 3, 15, 12, 0, 0, tzinfo=timezone.utc)
TODAY = date(2026, 3, 15)
PASSWORD = "Password123!"
JWT_SECRET = "test-jwt-secret-0123456789abcdef0123456789"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'SECRET_KEY': 'test-secret-key',
        'JWT_SECRET': JWT_SECRET,
        'BCRYPT_ROUNDS': 4,
        'CLOCK': FixedClock(NOW),
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def clock(app):
    """The app clock, back at NOW for every test."""
    fixed = app.extensions["qrmenu.clock"]
    fixed.set(NOW)
    return fixed


@pytest.fixture(scope='function')
def db_session(app, clock):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def setup_roles(db_session):
    """Setup the stored roles."""
    for name, description in ROLE_DEFINITIONS:
        db_session.add(Role(name=name, description=description))
    db_session.commit()


@pytest.fixture(scope='function')
def plans(db_session):
    """Free (1 restaurant, 3 months) and standard (3 restaurants, 12 months)."""
    free = Plan(code="free", name="Free", max_restaurants=1, yearly_price=Decimal("0.00"))
    standard = Plan(code="standard", name="Standard", max_restaurants=3, yearly_price=Decimal("1200.00"))
    db_session.add_all([free, standard])
    db_session.commit()
    return {"free": free, "standard": standard}


@pytest.fixture(scope='function')
def account_a(db_session):
    account = CustomerAccount(name="Account A", email="billing@cafe-a.test")
    db_session.add(account)
    db_session.commit()
    return account


@pytest.fixture(scope='function')
def account_b(db_session):
    account = CustomerAccount(name="Account B", email="billing@bistro-b.test")
    db_session.add(account)
    db_session.commit()
    return account


@pytest.fixture(scope='function')
def restaurant_a(db_session, account_a):
    """Restaurant A (first tenant)."""
    restaurant = Restaurant(name="Cafe A", slug="cafe-a", is_active=True, customer_account_id=account_a.id)
    db_session.add(restaurant)
    db_session.commit()
    return restaurant


@pytest.fixture(scope='function')
def restaurant_b(db_session, account_b):
    """Restaurant B (second tenant)."""
    restaurant = Restaurant(name="Bistro B", slug="bistro-b", is_active=True, customer_account_id=account_b.id)
    db_session.add(restaurant)
    db_session.commit()
    return restaurant


@pytest.fixture(scope='function')
def user_factory(db_session, setup_roles):
    """Create users: user_factory(email, roles, restaurant=None, account=None)."""
    def make_user(email, role_names, restaurant=None, account=None, first_name="Test", last_name="User"):
        user = User(
            email=email,
            password_hash=hash_password(PASSWORD),
            first_name=first_name,
            last_name=last_name,
            customer_account_id=account.id if account is not None else None,
        )
        for role_name in role_names:
            user.add_role(db_session.query(Role).filter_by(name=role_name).one())
        if restaurant is not None:
            user.add_restaurant(restaurant)
        db_session.add(user)
        db_session.commit()
        return user

    return make_user


@pytest.fixture(scope='function')
def owner_a(user_factory, restaurant_a, account_a):
    return user_factory("owner@cafe-a.test", [ROLE_RESTAURANT_OWNER], restaurant_a, account_a, "Anna", "Owner")


@pytest.fixture(scope='function')
def owner_b(user_factory, restaurant_b, account_b):
    return user_factory("owner@bistro-b.test", [ROLE_RESTAURANT_OWNER], restaurant_b, account_b, "Boris", "Owner")


@pytest.fixture(scope='function')
def editor_a(user_factory, restaurant_a):
    return user_factory("editor@cafe-a.test", [ROLE_EDITOR], restaurant_a, None, "Eddie", "Editor")


@pytest.fixture(scope='function')
def super_admin(user_factory):
    return user_factory("admin@qrmenu.test", [ROLE_SUPER_ADMIN], None, None, "Sam", "Admin")


@pytest.fixture(scope='function')
def subscription_a(db_session, account_a, plans):
    """Active standard subscription covering TODAY."""
    subscription = CustomerSubscription(
        customer_account_id=account_a.id,
        plan_id=plans["standard"].id,
        starts_at=date(2026, 1, 1),
        ends_at=date(2026, 12, 31),
        is_active=True,
    )
    db_session.add(subscription)
    db_session.commit()
    return subscription


@pytest.fixture(scope='function')
def expired_subscription_a(db_session, account_a, plans):
    """Still flagged active, but its period ended yesterday."""
    subscription = CustomerSubscription(
        customer_account_id=account_a.id,
        plan_id=plans["standard"].id,
        starts_at=date(2025, 3, 14),
        ends_at=date(2026, 3, 14),
        is_active=True,
    )
    db_session.add(subscription)
    db_session.commit()
    return subscription


@pytest.fixture(scope='function')
def category_a(db_session, restaurant_a):
    category = Category(restaurant_id=restaurant_a.id, name="Drinks", sort_order=0)
    db_session.add(category)
    db_session.commit()
    return category


@pytest.fixture(scope='function')
def category_b(db_session, restaurant_b):
    category = Category(restaurant_id=restaurant_b.id, name="Mains", sort_order=0)
    db_session.add(category)
    db_session.commit()
    return category


@pytest.fixture(scope='function')
def product_a(db_session, category_a):
    """DRAFT product in Restaurant A."""
    product = Product(
        restaurant_id=category_a.restaurant_id,
        category_id=category_a.id,
        name="Lemonade",
        price=Decimal("3.50"),
        status=ProductStatus.DRAFT,
    )
    db_session.add(product)
    db_session.commit()
    return product


@pytest.fixture(scope='function')
def product_b(db_session, category_b):
    """DRAFT product in Restaurant B."""
    product = Product(
        restaurant_id=category_b.restaurant_id,
        category_id=category_b.id,
        name="Goulash",
        price=Decimal("12.00"),
        status=ProductStatus.DRAFT,
    )
    db_session.add(product)
    db_session.commit()
    return product


def issue_token(app, user) -> str:
    """Helper to sign an access token for a user."""
    return app.extensions["qrmenu.token_codec"].issue_access_token(Principal.from_user(user))


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture(scope='function')
def owner_a_headers(app, owner_a):
    return auth_headers(issue_token(app, owner_a))


@pytest.fixture(scope='function')
def owner_b_headers(app, owner_b):
    return auth_headers(issue_token(app, owner_b))


@pytest.fixture(scope='function')
def editor_a_headers(app, editor_a):
    return auth_headers(issue_token(app, editor_a))


@pytest.fixture(scope='function')
def super_admin_headers(app, super_admin):
    return auth_headers(issue_token(app, super_admin))


@pytest.fixture(scope='function')
def token_for(app):
    """Sign an access token for any user: token_for(user) -> headers."""
    def make_headers(user):
        return auth_headers(issue_token(app, user))

    return make_headers
