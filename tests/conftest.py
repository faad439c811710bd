import sys
import os
import pytest

# 1. Add the parent directory to Python's path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

# 2. NOW import from app
from app import create_app
from extensions import db
from models import User, FoodListing, FoodNeed

@pytest.fixture
def app():
    """Create and configure a new app instance for each test."""
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
        "JWT_SECRET_KEY": "test-secret-key-that-is-long-enough-for-hs256"
    })

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()

@pytest.fixture
def client(app):
    return app.test_client()

# ==========================================
#  SHARED FACTORIES
# ==========================================

@pytest.fixture
def user_factory(app):
    counter = {'n': 0}

    def _create(role='donor', **kwargs):
        counter['n'] += 1
        defaults = {
            "name": f"{role.capitalize()} {counter['n']}",
            "email": f"{role}{counter['n']}@test.com",
            "role": role,
            "is_verified": True
        }
        defaults.update(kwargs)
        user = User(**defaults)
        user.set_password("password")
        db.session.add(user)
        db.session.commit()
        return user
    return _create

@pytest.fixture
def listing_factory(app):
    def _create(donor, **kwargs):
        defaults = {
            "title": "Jollof Rice",
            "quantity": 10.0,
            "category": "Cooked",
            "lat": 6.5244,
            "lng": 3.3792,
            "donor_id": donor.id,
            "status": "Available"
        }
        defaults.update(kwargs)
        item = FoodListing(**defaults)
        db.session.add(item)
        db.session.commit()
        return item
    return _create

@pytest.fixture
def need_factory(app):
    def _create(ngo, **kwargs):
        defaults = {
            "title": "Meals for shelter",
            "quantity": 20.0,
            "category": "Cooked",
            "lat": 6.5244,
            "lng": 3.3792,
            "ngo_id": ngo.id,
            "urgency": "Standard",
            "status": "Open"
        }
        defaults.update(kwargs)
        item = FoodNeed(**defaults)
        db.session.add(item)
        db.session.commit()
        return item
    return _create

@pytest.fixture
def login(client):
    """Returns auth headers for a user created with password 'password'."""
    def _login(user):
        resp = client.post('/api/auth/login', json={"email": user.email, "password": "password"})
        return {'Authorization': f'Bearer {resp.get_json()["access_token"]}'}
    return _login
