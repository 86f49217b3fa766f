from fastapi import FastAPI, HTTPException, Depends, Query, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from typing import List, Optional

import lightbnb
import models_pydantic as schemas
from config import configure_logging
from database import get_db
from errors import RepositoryError

configure_logging()

app = FastAPI(title="LightBnB")


@app.exception_handler(RepositoryError)
def repository_error_handler(request: Request, exc: RepositoryError):
    headers = {"Retry-After": "5"} if exc.retryable else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "code": exc.code},
        headers=headers,
    )

# ---------- User Endpoints ----------
@app.post("/users/", response_model=schemas.UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(user: schemas.UserCreate, db: Session = Depends(get_db)):
    if lightbnb.get_user_with_email(db, user.email):
        raise HTTPException(status_code=409, detail="Email already registered")
    return schemas.UserResponse.model_validate(lightbnb.add_user(db, user))

@app.get("/users/by-email/{email}", response_model=schemas.UserResponse)
def get_user_by_email(email: str, db: Session = Depends(get_db)):
    user = lightbnb.get_user_with_email(db, email)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return schemas.UserResponse.model_validate(user)

@app.get("/users/{user_id}", response_model=schemas.UserResponse)
def get_user(user_id: int, db: Session = Depends(get_db)):
    user = lightbnb.get_user_with_id(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return schemas.UserResponse.model_validate(user)

# ---------- Reservation Endpoints ----------
@app.get("/users/{guest_id}/reservations", response_model=List[schemas.ReservationListing])
def list_guest_reservations(
    guest_id: int,
    limit: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
):
    if not lightbnb.get_user_with_id(db, guest_id):
        raise HTTPException(status_code=404, detail="User not found")
    rows = lightbnb.get_all_reservations(db, guest_id, limit)
    return [schemas.ReservationListing.model_validate(r) for r in rows]

# ---------- Property Endpoints ----------
@app.get("/properties/", response_model=List[schemas.PropertyResponse])
def list_properties(
    minimum_price_per_night: Optional[int] = Query(None, ge=0),
    maximum_price_per_night: Optional[int] = Query(None, ge=0),
    city: Optional[str] = None,
    owner_id: Optional[int] = None,
    minimum_rating: Optional[float] = Query(None, ge=0, le=5),
    limit: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
):
    options = schemas.PropertySearchOptions(
        minimum_price_per_night=minimum_price_per_night,
        maximum_price_per_night=maximum_price_per_night,
        city=city,
        owner_id=owner_id,
        minimum_rating=minimum_rating,
    )
    rows = lightbnb.get_all_properties(db, options, limit)
    return [schemas.PropertyResponse.model_validate(p) for p in rows]

@app.post("/properties/", response_model=schemas.PropertyResponse, status_code=status.HTTP_201_CREATED)
def create_property(property: schemas.PropertyCreate, db: Session = Depends(get_db)):
    if not lightbnb.get_user_with_id(db, property.owner_id):
        raise HTTPException(status_code=400, detail="Owner does not exist")
    return schemas.PropertyResponse.model_validate(lightbnb.add_property(db, property))
