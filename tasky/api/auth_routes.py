import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import EmailStr, Field
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tasky.api.dto import ApiModel
from tasky.storage.database import get_db
from tasky.storage.repositories import UserRepository
from tasky.utils.security import create_access_token, hash_password, normalize_email, verify_password

router = APIRouter()
logger = logging.getLogger(__name__)


class RegisterRequest(ApiModel):
    email: EmailStr
    password: str = Field(..., min_length=8)


class LoginRequest(ApiModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class AuthResponse(ApiModel):
    token: str


@router.post("/register", status_code=status.HTTP_204_NO_CONTENT, summary="Register a new account")
def register(req: RegisterRequest, db: Session = Depends(get_db)):
    """
    Create an account for an email address.

    **Error Handling:**
    - 409: Email already registered
    - 422: Invalid email or password shorter than 8 characters
    """
    email = normalize_email(req.email)
    users = UserRepository(db)
    if users.email_exists(email):
        logger.warning("Registration rejected: email already registered")
        raise HTTPException(status_code=409, detail="Email already registered")

    try:
        user = users.add(email, hash_password(req.password))
    except IntegrityError:
        # concurrent registration won the unique constraint
        db.rollback()
        logger.warning("Registration rejected: unique constraint on email")
        raise HTTPException(status_code=409, detail="Email already registered")

    logger.info(f"Registered user {user.id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/login", response_model=AuthResponse, summary="Exchange credentials for a token")
def login(req: LoginRequest, db: Session = Depends(get_db)):
    user = UserRepository(db).get_by_email(normalize_email(req.email))
    if user is None or not verify_password(req.password, user.password_hash):
        logger.warning("Login failed: invalid credentials")
        raise HTTPException(status_code=401, detail="Invalid credentials")

    logger.info(f"User {user.id} logged in")
    return AuthResponse(token=create_access_token(user.id, user.email))
