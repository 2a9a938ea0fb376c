from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from database import Base


def utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    username: Mapped[str] = mapped_column(unique=True)
    password: Mapped[str] = mapped_column() #хеш
    email: Mapped[Optional[str]] = mapped_column()
    created_at: Mapped[datetime] = mapped_column(default=utcnow)

    progress: Mapped[list["QuizProgress"]] = relationship(
        back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )
    attempts: Mapped[list["QuizAttempt"]] = relationship(
        back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )


class QuizProgress(Base):
    __tablename__ = "quiz_progress"
    __table_args__ = (UniqueConstraint("user_id", "quiz_name"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"))
    quiz_name: Mapped[str] = mapped_column()
    attempts: Mapped[int] = mapped_column(default=0)
    passes: Mapped[int] = mapped_column(default=0)
    last_updated: Mapped[datetime] = mapped_column(default=utcnow)

    user: Mapped["User"] = relationship(back_populates="progress")


class QuizAttempt(Base):
    __tablename__ = "quiz_attempts"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    quiz_name: Mapped[str] = mapped_column()
    score: Mapped[int] = mapped_column()
    total_questions: Mapped[int] = mapped_column()
    passed: Mapped[bool] = mapped_column()
    attempt_date: Mapped[datetime] = mapped_column(default=utcnow)

    user: Mapped["User"] = relationship(back_populates="attempts")
