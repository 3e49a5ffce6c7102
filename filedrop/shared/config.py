# filedrop/shared/config.py
from pydantic import BaseModel
from dotenv import load_dotenv
import os

load_dotenv()

class Settings(BaseModel):
    ENV: str = os.getenv("ENV", "dev")
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "3000"))

    # where uploaded bytes live, and where they are served from
    UPLOAD_DIR: str = os.getenv("UPLOAD_DIR", "uploads")
    STATIC_PREFIX: str = os.getenv("STATIC_PREFIX", "/uploads")
    MAX_FILES_PER_REQUEST: int = int(os.getenv("MAX_FILES_PER_REQUEST", "10"))

    # metadata store
    DB_URL: str = os.getenv("DB_URL", "sqlite:///./storage/filedrop.db")

    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "*")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

settings = Settings()
