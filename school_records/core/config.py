# school_records/core/config.py
"""Application configuration using Pydantic."""
from pydantic_settings import BaseSettings
from typing import List

class Settings(BaseSettings):
    database_url: str

    app_version: str = '1.0.0'
    environment: str = 'development'
    log_level: str = 'info'
    allowed_origins: List[str] = ['*']

    # Record store
    store_timeout_seconds: float = 10.0
    auto_create_tables: bool = True
    key_lock_shards: int = 64

    # Listing and reports
    default_page_size: int = 10
    overview_religions: List[str] = ['Islam', 'Hindu']

    model_config = {
        'env_file': '.env',
        'extra': 'ignore'
    }

settings = Settings()
