"""Configuration settings for the record service."""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class Settings(BaseSettings):
    """Application settings."""
    
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore"  # Ignore extra environment variables
    )
    
    # API
    api_title: str = "Diagram Record Service"
    api_version: str = "1.0.0"
    # Deployment setting only. Can be overridden via env var:
    # CORS_ORIGINS='["http://localhost:5173"]'
    cors_origins: List[str] = [
        "http://localhost:5173",
        "http://localhost:5174",
        "http://localhost:8080",
    ]
    
    # Relational store
    database_path: str = "data/records.db"


settings = Settings()
