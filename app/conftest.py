from datetime import date
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import models_sqlalchemy as models
from api_endpoints import app
from database import get_db

# ---------- TEST FIXTURES ----------

# Fresh in-memory SQLite per test; StaticPool keeps the single connection alive
TEST_DATABASE_URL = "sqlite://"


def _enable_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture
def engine():
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(engine, "connect", _enable_foreign_keys)
    models.Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(engine):
    Session = sessionmaker(bind=engine, autoflush=False)
    session = Session()
    yield session
    session.close()


@pytest.fixture
def client(db_session):
    """Override get_db dependency for FastAPI TestClient."""

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture
def broken_session():
    """A session whose engine cannot open its database file."""
    engine = create_engine("sqlite:////nonexistent-lightbnb-dir/missing/lightbnb.db")
    session = sessionmaker(bind=engine)()
    yield session
    session.close()
    engine.dispose()

# ---------- TEST DATA ----------

def property_fields(owner_id, title="Cozy Cabin", city="Denver", cost_per_night=100, **overrides):
    fields = {
        "owner_id": owner_id,
        "title": title,
        "description": "description",
        "thumbnail_photo_url": "https://images.example.com/thumb.jpg",
        "cover_photo_url": "https://images.example.com/cover.jpg",
        "cost_per_night": cost_per_night,
        "parking_spaces": 1,
        "number_of_bathrooms": 1,
        "number_of_bedrooms": 2,
        "country": "Canada",
        "street": "123 Main St",
        "city": city,
        "province": "BC",
        "post_code": "V5K 0A1",
    }
    fields.update(overrides)
    return fields


@pytest.fixture
def listings(db_session):
    """Owners, guests, five properties with reviews, and three stays for one guest.

    Ratings: loft [3, 5], lake house [5], budget room none, suite [2], penthouse [4].
    """
    alice = models.User(name="Alice", email="alice@example.com", password="password")
    bob = models.User(name="Bob", email="bob@example.com", password="password")
    carol = models.User(name="Carol", email="carol@example.com", password="password")
    db_session.add_all([alice, bob, carol])
    db_session.flush()

    loft = models.Property(**property_fields(alice.id, "Downtown Loft", "Vancouver, BC", 150))
    lake = models.Property(**property_fields(alice.id, "Lake House", "Austin", 120))
    budget = models.Property(**property_fields(alice.id, "Budget Room", "austin", 80))
    suite = models.Property(**property_fields(alice.id, "South Congress Suite", "North Austin", 200))
    penthouse = models.Property(**property_fields(bob.id, "Penthouse", "Toronto", 450))
    db_session.add_all([loft, lake, budget, suite, penthouse])
    db_session.flush()

    # Carol's stays carry the reviews so Bob's reservation list stays small
    ratings = {loft: [3, 5], lake: [5], suite: [2], penthouse: [4]}
    for prop, scores in ratings.items():
        stay = models.Reservation(
            guest_id=carol.id, property_id=prop.id,
            start_date=date(2022, 5, 1), end_date=date(2022, 5, 3),
        )
        db_session.add(stay)
        db_session.flush()
        for score in scores:
            db_session.add(models.PropertyReview(
                guest_id=carol.id, property_id=prop.id, reservation_id=stay.id, rating=score,
            ))

    bob_stays = [
        models.Reservation(guest_id=bob.id, property_id=lake.id,
                           start_date=date(2024, 3, 1), end_date=date(2024, 3, 5)),
        models.Reservation(guest_id=bob.id, property_id=budget.id,
                           start_date=date(2025, 1, 10), end_date=date(2025, 1, 12)),
        models.Reservation(guest_id=bob.id, property_id=loft.id,
                           start_date=date(2023, 6, 1), end_date=date(2023, 6, 3)),
    ]
    db_session.add_all(bob_stays)
    db_session.commit()

    return SimpleNamespace(
        alice=alice.id, bob=bob.id, carol=carol.id,
        loft=loft.id, lake=lake.id, budget=budget.id, suite=suite.id, penthouse=penthouse.id,
    )
