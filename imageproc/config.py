from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Image Processing Service"
    debug: bool = False
    log_level: str = "INFO"
    upload_dir: str = "uploads"
    processed_dir: str = "processed"
    static_dir: str = "static"
    host: str = "127.0.0.1"
    port: int = 8080
    upload_chunk_size: int = Field(default=64 * 1024, ge=1)

    @property
    def upload_path(self) -> Path:
        return Path(self.upload_dir)

    @property
    def processed_path(self) -> Path:
        return Path(self.processed_dir)

    @property
    def static_path(self) -> Path:
        return Path(self.static_dir)

    def ensure_directories(self) -> None:
        self.upload_path.mkdir(parents=True, exist_ok=True)
        self.processed_path.mkdir(parents=True, exist_ok=True)


settings = Settings()
