import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()

#заглушка только для локальной разработки
INSECURE_DEV_SECRET = "insecure-dev-secret-change-me"


@dataclass
class Settings:
    database_url: str = "sqlite+aiosqlite:///./quiz_progress.db"
    jwt_secret: str = INSECURE_DEV_SECRET
    algorithm: str = "HS256"
    token_expire_days: int = 30
    bcrypt_rounds: int = 10
    host: str = "0.0.0.0"
    port: int = 3000
    sql_echo: bool = False

    @property
    def uses_insecure_secret(self) -> bool:
        return self.jwt_secret == INSECURE_DEV_SECRET

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            database_url=os.getenv("DATABASE_URL", cls.database_url),
            jwt_secret=os.getenv("JWT_SECRET", INSECURE_DEV_SECRET),
            token_expire_days=int(os.getenv("TOKEN_EXPIRE_DAYS", cls.token_expire_days)),
            host=os.getenv("HOST", cls.host),
            port=int(os.getenv("PORT", cls.port)),
            sql_echo=os.getenv("SQL_ECHO", "").lower() in ("1", "true", "yes"),
        )
