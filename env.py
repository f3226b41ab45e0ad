import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()

def _int(name, default):
    return int(os.getenv(name) or default)


def _flag(name, default):
    return os.getenv(name, str(default)).lower() == "true"


# MongoDB connection settings (MONGO_DB_URL, MONGODB_HOST, MONGODB_PORT,
# MONGODB_USERNAME, MONGODB_PASSWORD, MONGODB_DBNAME) are read by util.mongodb_utils
PORT = _int("PORT", 3000)
DEVELOPMENT_MODE = os.getenv("DEVELOPMENT_MODE", "false").lower() == "true"


@dataclass(frozen=True)
class Settings:
    post_title_enabled: bool = False
    unscoped_comments_enabled: bool = True
    generate_posts_enabled: bool = True


@lru_cache()
def get_settings() -> Settings:
    """Feature flags, read once per process."""
    return Settings(
        post_title_enabled=_flag("POST_TITLE_ENABLED", False),
        unscoped_comments_enabled=_flag("UNSCOPED_COMMENTS_ENABLED", True),
        generate_posts_enabled=_flag("GENERATE_POSTS_ENABLED", True),
    )
