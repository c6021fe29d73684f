import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env file for local development
load_dotenv()

BASE_DIR = Path(__file__).resolve().parent


@dataclass
class Settings:
    database_url: str
    jwt_secret: str
    uploads_dir: Path
    backend_url: str
    max_upload_bytes: int
    password_salt_rounds: int
    api_prefix: str
    cors_origins: list
    log_level: str

    @classmethod
    def from_env(cls) -> "Settings":
        # Fallback to local SQLite if DATABASE_URL is not set
        database_url = os.getenv("DATABASE_URL", f"sqlite:///{BASE_DIR / 'acadrive.db'}")
        uploads_dir = Path(os.getenv("UPLOADS_DIR", str(BASE_DIR / "uploads")))
        origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
        return cls(
            database_url=database_url,
            jwt_secret=os.getenv("JWT_SECRET", ""),
            uploads_dir=uploads_dir,
            backend_url=os.getenv("BACKEND_URL", "").rstrip("/"),
            max_upload_bytes=int(os.getenv("MAX_UPLOAD_BYTES", str(5 * 1024 * 1024))),
            # bcrypt cost below 10 is not accepted
            password_salt_rounds=max(10, int(os.getenv("PASSWORD_SALT_ROUNDS", "10"))),
            api_prefix=os.getenv("API_PREFIX", "/api").rstrip("/"),
            cors_origins=origins or ["*"],
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )


settings = Settings.from_env()
