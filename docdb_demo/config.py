from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Application configuration"""

    # Application
    app_name: str = "docdb-demo"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"

    # MongoDB connection
    mongodb_uri: str = "mongodb+srv://REPLACE-ME/"
    database_name: str = "test"
    collection_name: str = "test"
    server_selection_timeout_ms: int = 30000

    # Consistency and durability
    write_concern: str = "majority"
    write_concern_timeout_ms: int = 5000
    read_concern: str = "majority"
    retry_writes: bool = True
    retry_reads: bool = True
    compressors: List[str] = ["snappy"]

    # Demo parameters
    seed_count: int = 1000
    seed_name: str = "Dupont"
    page_skip: int = 0
    page_size: int = 20
    page_max_time_ms: int = 10000
    update_target_age: int = 5
    update_years_back: int = 5
    delete_age_threshold: int = 5

    # Transaction
    transaction_newcomer_name: str = "Durand"
    transaction_newcomer_age: int = 30
    transaction_max_commit_time_ms: int = 10000
    transaction_commit_retries: int = 3

    class Config:
        env_file = ".env"
        case_sensitive = False


# Global settings instance
settings = Settings()
