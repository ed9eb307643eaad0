"""Configuration management."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings pulled from POLYGON_MAP_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="POLYGON_MAP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Map generation
    map_width: float = Field(default=800.0, gt=0, description="Bounding box width")
    map_height: float = Field(default=600.0, gt=0, description="Bounding box height")
    samples: int = Field(default=500, gt=0, description="Number of sampled sites")
    lloyd_iterations: int = Field(default=2, ge=0, description="Lloyd relaxation steps")
    seed: str = Field(default="default", description="Seed of the Alea random source")

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    log_format: str = Field(default="json", pattern="^(json|console)$", description="Log renderer (json or console)")


settings = Settings()
