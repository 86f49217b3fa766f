from sqlalchemy import (
    Boolean, Column, Date, ForeignKey, Integer, SmallInteger, String, Text, CheckConstraint, true
)
from sqlalchemy.orm import declarative_base, relationship

# Reference schema. Production databases are created outside this package;
# the tests build it from these definitions.

Base = declarative_base()

class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password = Column(String(255), nullable=False)

    properties = relationship("Property", back_populates="owner", cascade="all, delete-orphan")
    reservations = relationship("Reservation", back_populates="guest", cascade="all, delete-orphan")

class Property(Base):
    __tablename__ = "properties"
    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    thumbnail_photo_url = Column(String(255), nullable=False)
    cover_photo_url = Column(String(255), nullable=False)
    cost_per_night = Column(Integer, nullable=False, default=0)
    parking_spaces = Column(Integer, nullable=False, default=0)
    number_of_bathrooms = Column(Integer, nullable=False, default=0)
    number_of_bedrooms = Column(Integer, nullable=False, default=0)
    country = Column(String(255), nullable=False)
    street = Column(String(255), nullable=False)
    city = Column(String(255), nullable=False)
    province = Column(String(255), nullable=False)
    post_code = Column(String(255), nullable=False)
    active = Column(Boolean, nullable=False, server_default=true())

    owner = relationship("User", back_populates="properties")
    reservations = relationship("Reservation", back_populates="property", cascade="all, delete-orphan")
    reviews = relationship("PropertyReview", back_populates="property", cascade="all, delete-orphan")

class Reservation(Base):
    __tablename__ = "reservations"
    id = Column(Integer, primary_key=True, index=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    property_id = Column(Integer, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False)
    guest_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    property = relationship("Property", back_populates="reservations")
    guest = relationship("User", back_populates="reservations")

class PropertyReview(Base):
    __tablename__ = "property_reviews"
    __table_args__ = (CheckConstraint("rating BETWEEN 1 AND 5", name="ck_property_reviews_rating"),)
    id = Column(Integer, primary_key=True, index=True)
    guest_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    property_id = Column(Integer, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False)
    reservation_id = Column(Integer, ForeignKey("reservations.id", ondelete="CASCADE"), nullable=False)
    rating = Column(SmallInteger, nullable=False)
    message = Column(Text, nullable=True)

    property = relationship("Property", back_populates="reviews")
