from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

PACKAGE_DIR = Path(__file__).resolve().parent


class Settings(BaseSettings):
    # API Keys
    MISTRAL_API_KEY: str
    ELEVEN_API_KEY: str

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["*"]
    MAX_BODY_BYTES: int = 2 * 1024 * 1024

    # Model settings
    MISTRAL_MODEL: str = "mistral-small-latest"
    ELEVEN_MODEL: str = "eleven_multilingual_v2"
    ELEVEN_VOICE_ID: str = "JBFqnCBsd6RMkjVDRZzb"
    ELEVEN_OUTPUT_FORMAT: str = "mp3_44100_128"

    # When true, the payment gate is bypassed
    DEMO_MODE: bool = True

    # CIH/CMI payment gateway (stub only)
    CMI_MERCHANT_ID: Optional[str] = None
    CMI_SECRET: Optional[str] = None
    CMI_ENDPOINT: Optional[str] = None

    # Static assets; generated audio lands in PUBLIC_DIR/outputs
    PUBLIC_DIR: Path = PACKAGE_DIR / "public"

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, frozen=True
    )

    @property
    def output_dir(self) -> Path:
        return self.PUBLIC_DIR / "outputs"


@lru_cache
def get_settings() -> Settings:
    """Build the process-wide settings once, at startup."""
    return Settings()
