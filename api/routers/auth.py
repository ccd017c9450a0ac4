# api/routers/auth.py

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer, OAuth2PasswordRequestForm
from sqlalchemy.engine import Connection

from .. import crud, schemas, security
from ..database import get_db

logger = logging.getLogger(__name__)

# This scheme will look for a token in the "Authorization" header.
# The `tokenUrl` points to our login endpoint.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="token")

router = APIRouter(
    tags=["authentication"],
)


async def get_current_user(
    conn: Connection = Depends(get_db), token: str = Depends(oauth2_scheme)
):
    """
    Dependency resolving the bearer token to the stored user.
    Every skill and progress route sits behind it.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    email = security.decode_access_token(token)
    if email is None:
        raise credentials_exception

    user = crud.get_user_by_email(conn, email=email)
    if user is None or not user.is_active:
        raise credentials_exception
    return user


async def get_current_admin(current_user: schemas.User = Depends(get_current_user)):
    """Dependency for routes that change data shared by every user."""
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required",
        )
    return current_user


@router.post("/users/", response_model=schemas.User, status_code=status.HTTP_201_CREATED)
def register_user(user: schemas.UserCreate, conn: Connection = Depends(get_db)):
    if crud.get_user_by_email(conn, email=user.email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered",
        )
    created = crud.create_user(conn, user)
    logger.info("Registered user %s", user.email)
    return created


@router.get("/users/me", response_model=schemas.User)
def read_users_me(current_user: schemas.User = Depends(get_current_user)):
    return current_user


@router.post("/token", response_model=schemas.Token)
def login_for_access_token(
    conn: Connection = Depends(get_db),
    form_data: OAuth2PasswordRequestForm = Depends(),
):
    user = crud.get_user_by_email(conn, email=form_data.username)
    if not user or not security.verify_password(form_data.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    access_token = security.create_access_token(user.email)
    return {"access_token": access_token, "token_type": "bearer"}
