from typing import Optional
from datetime import date
from pydantic import BaseModel, ConfigDict, EmailStr, Field

class UserBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr

class UserCreate(UserBase):
    password: str = Field(..., min_length=1, max_length=255)

class UserResponse(UserBase):
    model_config = ConfigDict(from_attributes=True)

    id: int

class PropertyBase(BaseModel):
    owner_id: int
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    thumbnail_photo_url: str = Field(..., min_length=1, max_length=255)
    cover_photo_url: str = Field(..., min_length=1, max_length=255)
    cost_per_night: int = Field(..., ge=0)
    parking_spaces: int = Field(0, ge=0)
    number_of_bathrooms: int = Field(0, ge=0)
    number_of_bedrooms: int = Field(0, ge=0)
    country: str = Field(..., min_length=1, max_length=255)
    street: str = Field(..., min_length=1, max_length=255)
    city: str = Field(..., min_length=1, max_length=255)
    province: str = Field(..., min_length=1, max_length=255)
    post_code: str = Field(..., min_length=1, max_length=255)

class PropertyCreate(PropertyBase):
    pass

class PropertyResponse(PropertyBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    active: bool = True
    average_rating: Optional[float] = None

class PropertySearchOptions(BaseModel):
    """Optional filters for a property listing; unset or falsy values are ignored."""
    minimum_price_per_night: Optional[int] = Field(None, ge=0)
    maximum_price_per_night: Optional[int] = Field(None, ge=0)
    city: Optional[str] = None
    owner_id: Optional[int] = None
    minimum_rating: Optional[float] = Field(None, ge=0, le=5)

class ReservationListing(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    cost_per_night: int
    start_date: date
    end_date: date
    number_of_bedrooms: int
    number_of_bathrooms: int
    parking_spaces: int
    average_rating: Optional[float] = None
