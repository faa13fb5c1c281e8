# designz_loader/core/config.py
from typing import List
from pydantic_settings import BaseSettings
from dotenv import load_dotenv
load_dotenv()

class Settings(BaseSettings):
    BACKEND_API_URL: str = "https://devapi.wedesignz.com"
    BACKEND_TIMEOUT: float = 30.0
    MINIMUM_DESIGNS_PATH: str = "/api/designers/onboarding/minimum-designs/"
    CATEGORIES_PATH: str = "/api/catalog/categories/"
    SUBCATEGORIES_PATH: str = "/api/catalog/categories/{category_id}/subcategories/"
    BULK_UPLOAD_PATH: str = "/api/designers/onboarding/step4/"

    DEFAULT_MINIMUM_DESIGNS: int = 50
    TEMPLATE_DROPDOWN_ROWS: int = 500
    UPLOAD_DIR: str = "uploads"

    DATABASE_URL: str = "sqlite://db.sqlite3"
    REDIS_URL: str = "redis://localhost:6379/2"
    CELERY_BROKER_URL: str = "redis://localhost:6379/0"
    CELERY_RESULT_BACKEND: str = "redis://localhost:6379/1"

    CORS_ORIGINS: List[str] = ["http://localhost:3000"]
    LOG_LEVEL: str = "INFO"

settings = Settings()
