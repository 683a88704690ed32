from dotenv import load_dotenv
from pydantic_settings import BaseSettings
from typing import List, Optional

load_dotenv()

class Settings(BaseSettings):
    app_name: str = "Zone API"
    version: str = "1.0.0"
    environment: str = "development"  # development | production | test
    debug: bool = False
    log_level: str = "INFO"

    # Base de datos
    db_user: str = "postgres"
    db_password: str = "postgres"
    db_host: str = "localhost"
    db_port: int = 5432
    db_name: str = "zones"
    db_url: Optional[str] = None  # URL completa, p.ej. sqlite:///./zones.db

    # Seguridad
    secret_key: str = "change-me-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 15
    refresh_token_expire_days: int = 7

    # API
    api_prefix: str = "/api"
    default_page_size: int = 100
    statistics_sample_size: int = 1000

    # CORS
    allowed_origins: List[str] = [
        "http://localhost:8081",
        "exp://127.0.0.1:19000",
    ]

    class Config:
        env_file = ".env"
        case_sensitive = False

    @property
    def database_url(self) -> str:
        if self.db_url:
            return self.db_url
        return f"postgresql://{self.db_user}:{self.db_password}@{self.db_host}:{self.db_port}/{self.db_name}"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

settings = Settings()
