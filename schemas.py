from datetime import datetime
from typing import Optional

from pydantic import BaseModel


#схема юзеров
class UserCreate(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None
    email: Optional[str] = None


class UserLogin(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


class UserResponse(BaseModel):
    id: int
    username: str

    class Config:
        from_attributes = True


#схемы токенов
class AuthResponse(BaseModel):
    message: str
    token: str
    user: UserResponse


#прогресс
class AttemptCreate(BaseModel):
    quiz_name: Optional[str] = None
    passed: Optional[bool] = None
    score: Optional[int] = None
    total_questions: Optional[int] = None


class ProgressResponse(BaseModel):
    quiz_name: str
    attempts: int = 0
    passes: int = 0

    class Config:
        from_attributes = True


class ProgressListResponse(BaseModel):
    progress: list[ProgressResponse]


class ProgressEnvelope(BaseModel):
    progress: ProgressResponse


class ProgressUpdateResponse(BaseModel):
    message: str
    progress: ProgressResponse


class MessageResponse(BaseModel):
    message: str


class AttemptResponse(BaseModel):
    score: int
    total_questions: int
    passed: bool
    attempt_date: datetime

    class Config:
        from_attributes = True


class HistoryResponse(BaseModel):
    history: list[AttemptResponse]


class StatsResponse(BaseModel):
    total_attempts: int
    total_passes: int
    pass_rate: int


class StatsEnvelope(BaseModel):
    stats: StatsResponse


class HealthResponse(BaseModel):
    status: str
    message: str
