"""Configuration management using Pydantic Settings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging
    log_level: str = Field("INFO")
    log_format: str = Field("json", pattern="^(json|text)$")

    # Global print defaults for forest plot tables. The combined-analysis
    # defaults for p-values and I2 are derived from these in FormattingConfig.
    digits_forest: int = Field(2, ge=0)
    digits_se: int = Field(4, ge=0)
    digits_zval: int = Field(2, ge=0)
    digits_pval: int = Field(4, ge=1)
    digits_pval_q: int = Field(4, ge=1)
    digits_q: int = Field(2, ge=0)
    digits_tau2: int = Field(4, ge=0)
    digits_tau: int = Field(4, ge=0)
    digits_i2: int = Field(1, ge=0)
    scientific_pval: bool = False
    big_mark: str = ""

    # Confidence level used by the batch summarizer
    level: float = Field(0.95, gt=0, lt=1)


# Instantiate global settings
settings = Settings()
