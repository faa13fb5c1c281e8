# designz_loader/core/db.py
from designz_loader.core.config import settings

TORTOISE_ORM = {
    "connections": {
        "default": settings.DATABASE_URL,
    },
    "apps": {
        "models": {
            "models": ["designz_loader.models.db"],
            "default_connection": "default",
        }
    },
    "use_tz": False,
    "timezone": "UTC",
}
