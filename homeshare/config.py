"""Application settings."""

from pathlib import Path
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    host: str = "0.0.0.0"
    port: int = 3000
    debug: bool = False
    frontend_dir: Path = Path(__file__).resolve().parent.parent / "public"
    storage_dir: Path = Path("uploads")
    max_file_size: int = 100 * 1024 * 1024
    max_files: int = 20
    upload_rate_limit: int = 50  # uploads per client per window
    upload_rate_window_seconds: float = 15 * 60
    thumbnail_size: int = 200
    thumbnail_quality: int = 80
    archive_compression_level: int = 9
    chunk_size: int = 64 * 1024

    model_config = {"env_prefix": "HOMESHARE_", "frozen": True}


settings = Settings()
