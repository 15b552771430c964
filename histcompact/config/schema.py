"""Configuration schema using Pydantic."""

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class CompactionConfig(BaseModel):
    """History compaction configuration."""
    enabled: bool = True  # If false, compaction leaves history untouched


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = "INFO"  # loguru level name: DEBUG, INFO, WARNING, ...


class OutputConfig(BaseModel):
    """CLI output configuration."""
    indent: int = 2  # JSON indentation for written history


class Config(BaseSettings):
    """Root configuration for histcompact."""
    compaction: CompactionConfig = Field(default_factory=CompactionConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    model_config = SettingsConfigDict(
        env_prefix="HISTCOMPACT_",
        env_nested_delimiter="__",
    )
