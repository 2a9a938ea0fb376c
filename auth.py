import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Header, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from passlib.context import CryptContext
from jose import JWTError, jwt

import repository
from config import Settings
from database import get_db
from errors import AuthError, ConflictError, ValidationError
from models import User
from schemas import UserCreate, UserLogin, UserResponse, AuthResponse

logger = logging.getLogger("Auth")

#роутер
router = APIRouter(prefix="/api/auth", tags=["auth"])


@dataclass
class CurrentUser:
    id: int
    username: str


#функции
def make_password_context(rounds: int = 10) -> CryptContext:
    return CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__default_rounds=rounds)


def verify_password(pwd_context: CryptContext, plain_password, hashed_password):
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(pwd_context: CryptContext, password):
    return pwd_context.hash(password)


def create_access_token(user: User, settings: Settings, expires_delta: Optional[timedelta] = None) -> str:
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(days=settings.token_expire_days))
    to_encode = {"sub": str(user.id), "username": user.username, "exp": expire}
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.algorithm)


def decode_access_token(token: str, settings: Settings) -> CurrentUser:
    """Check signature and expiry of a bearer token and return who it was issued to."""
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.algorithm])
        user_id = int(payload["sub"])
        username = payload["username"]
    except (JWTError, KeyError, TypeError, ValueError):
        raise AuthError("Invalid or expired token", status.HTTP_403_FORBIDDEN)
    return CurrentUser(id=user_id, username=username)


async def register_user(
        db: AsyncSession,
        pwd_context: CryptContext,
        settings: Settings,
        username: Optional[str],
        password: Optional[str],
        email: Optional[str] = None
) -> tuple[str, User]:
    if not username or not password:
        raise ValidationError("Username and password are required")

    #проверка на дубликат
    if await repository.find_user_by_username(db, username) is not None:
        raise ConflictError("Username already exists")
    hashed_password = get_password_hash(pwd_context, password)
    user = await repository.insert_user(db, username, hashed_password, email)
    await repository.commit(db)
    logger.info("Registered user %s (id=%s)", user.username, user.id)
    return create_access_token(user, settings), user


async def login_user(
        db: AsyncSession,
        pwd_context: CryptContext,
        settings: Settings,
        username: Optional[str],
        password: Optional[str]
) -> tuple[str, User]:
    if not username or not password:
        raise ValidationError("Username and password are required")

    #поиск юзера
    user = await repository.find_user_by_username(db, username)

    #проверка пароля
    if user is None:
        pwd_context.dummy_verify()
        logger.info("Login failed for %s", username)
        raise AuthError("Invalid credentials")
    if not verify_password(pwd_context, password, user.password):
        logger.info("Login failed for %s", username)
        raise AuthError("Invalid credentials")

    #выдача токена
    return create_access_token(user, settings), user


#защита
async def get_current_user(
        request: Request,
        authorization: Optional[str] = Header(None)
) -> CurrentUser:
    #"<схема> <токен>", схему не проверяем
    _, _, token = (authorization or "").strip().partition(" ")
    token = token.strip()
    if not token:
        raise AuthError("Access token required")
    current_user = decode_access_token(token, request.app.state.settings)
    request.state.user = current_user
    return current_user


#эндпоинты

@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(user: UserCreate, request: Request, db: AsyncSession = Depends(get_db)):
    token, new_user = await register_user(
        db, request.app.state.pwd_context, request.app.state.settings,
        user.username, user.password, user.email
    )
    return AuthResponse(
        message="User created successfully",
        token=token,
        user=UserResponse.model_validate(new_user)
    )


@router.post("/login", response_model=AuthResponse)
async def login(form: UserLogin, request: Request, db: AsyncSession = Depends(get_db)):
    token, user = await login_user(
        db, request.app.state.pwd_context, request.app.state.settings,
        form.username, form.password
    )
    return AuthResponse(
        message="Login successful",
        token=token,
        user=UserResponse.model_validate(user)
    )

