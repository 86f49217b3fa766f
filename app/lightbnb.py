"""LightBnB data access: users, properties and reservations.

Every function takes the caller's ``Session`` and runs exactly one
statement on it. Lookups return a row dict or ``None``; listings return
a list of row dicts. Database failures propagate as ``RepositoryError``.
"""

import logging
from typing import Any, Optional

from sqlalchemy.orm import Session

import models_pydantic as schemas
from config import settings
from database import run_statement
from query_builder import Statement, build_property_search, validate_limit

logger = logging.getLogger(__name__)

Row = dict[str, Any]

PROPERTY_INSERT_COLUMNS = (
    "owner_id",
    "title",
    "description",
    "thumbnail_photo_url",
    "cover_photo_url",
    "cost_per_night",
    "parking_spaces",
    "number_of_bathrooms",
    "number_of_bedrooms",
    "country",
    "street",
    "city",
    "province",
    "post_code",
)

_INSERT_PROPERTY_SQL = "INSERT INTO properties ({columns}) VALUES ({placeholders}) RETURNING *;".format(
    columns=", ".join(PROPERTY_INSERT_COLUMNS),
    placeholders=", ".join(f":p{i}" for i in range(1, len(PROPERTY_INSERT_COLUMNS) + 1)),
)

_GUEST_RESERVATIONS_SQL = """
SELECT reservations.id, properties.title, properties.cost_per_night,
       reservations.start_date, reservations.end_date,
       properties.number_of_bedrooms, properties.number_of_bathrooms,
       properties.parking_spaces, avg(property_reviews.rating) AS average_rating
FROM reservations
JOIN properties ON reservations.property_id = properties.id
LEFT JOIN property_reviews ON properties.id = property_reviews.property_id
WHERE reservations.guest_id = :p1
GROUP BY reservations.id, properties.id
ORDER BY reservations.start_date ASC
LIMIT :p2;
""".strip()


def _run(db: Session, statement: Statement, operation: str, commit: bool = False):
    return run_statement(db, statement.sql, statement.bind_params(), operation, commit=commit)


# ---------- Users ----------

def get_user_with_email(db: Session, email: str) -> Optional[Row]:
    statement = Statement("SELECT * FROM users WHERE email = :p1;", (email,))
    return _run(db, statement, "get_user_with_email").first()


def get_user_with_id(db: Session, user_id: int) -> Optional[Row]:
    statement = Statement("SELECT * FROM users WHERE id = :p1;", (user_id,))
    return _run(db, statement, "get_user_with_id").first()


def add_user(db: Session, user: schemas.UserCreate) -> Row:
    """Insert a user and return the stored row; a taken email raises ConstraintViolationError."""
    statement = Statement(
        "INSERT INTO users (name, email, password) VALUES (:p1, :p2, :p3) RETURNING *;",
        (user.name, user.email, user.password),
    )
    row = _run(db, statement, "add_user", commit=True).first()
    logger.info("Created user %s", row["id"])
    return row


# ---------- Reservations ----------

def get_all_reservations(db: Session, guest_id: int, limit: Optional[int] = None) -> list[Row]:
    """A guest's reservations with property details, earliest start first."""
    if limit is None:
        limit = settings.default_result_limit
    statement = Statement(_GUEST_RESERVATIONS_SQL, (guest_id, validate_limit(limit)))
    return _run(db, statement, "get_all_reservations").rows


# ---------- Properties ----------

def get_all_properties(
    db: Session,
    options: Optional[schemas.PropertySearchOptions] = None,
    limit: Optional[int] = None,
) -> list[Row]:
    statement = build_property_search(options, limit)
    return _run(db, statement, "get_all_properties").rows


def add_property(db: Session, property: schemas.PropertyCreate) -> Row:
    data = property.model_dump()
    statement = Statement(
        _INSERT_PROPERTY_SQL,
        tuple(data[column] for column in PROPERTY_INSERT_COLUMNS),
    )
    row = _run(db, statement, "add_property", commit=True).first()
    logger.info("Created property %s for owner %s", row["id"], row["owner_id"])
    return row
