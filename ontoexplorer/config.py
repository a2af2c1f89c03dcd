from pathlib import Path
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings."""

    # Backend API Configuration
    api_base_url: str = Field(default="http://localhost:8080/api", env="API_BASE_URL")
    request_timeout: float = Field(default=30.0, env="REQUEST_TIMEOUT")

    # Search Configuration
    debounce_ms: int = Field(default=300, env="DEBOUNCE_MS")
    results_per_page: int = Field(default=10, env="RESULTS_PER_PAGE")

    # Overlay Configuration
    viewport_width: int = Field(default=1280, env="VIEWPORT_WIDTH")
    viewport_height: int = Field(default=800, env="VIEWPORT_HEIGHT")
    overlay_width: int = Field(default=300, env="OVERLAY_WIDTH")
    overlay_height: int = Field(default=160, env="OVERLAY_HEIGHT")
    overlay_margin: int = Field(default=10, env="OVERLAY_MARGIN")
    overlay_offset: int = Field(default=10, env="OVERLAY_OFFSET")

    # Logging Configuration
    log_level: str = Field(default="INFO", env="LOG_LEVEL")
    log_file: str = Field(default="logs/explorer.log", env="LOG_FILE")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @property
    def debounce_seconds(self) -> float:
        """Get the debounce quiet interval in seconds."""
        return self.debounce_ms / 1000.0

    @property
    def log_dir(self) -> Path:
        """Get log directory path."""
        return Path(self.log_file).parent

    def ensure_directories(self):
        """Ensure necessary directories exist."""
        self.log_dir.mkdir(parents=True, exist_ok=True)


settings = Settings()
settings.ensure_directories()
