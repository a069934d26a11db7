"""Application configuration using Pydantic settings."""
from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Record store
    database_url: str

    # API Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    environment: str = "development"

    # CORS
    allowed_origins: str = "http://localhost:3000,http://localhost:5173"

    # Public links
    public_base_url: str = "http://localhost:8000"

    # Supabase Auth (identity provider)
    supabase_url: Optional[str] = None
    supabase_anon_key: Optional[str] = None  # Public anon key, sent as the apikey header
    identity_timeout_seconds: float = 10.0
    min_password_length: int = 8

    # Page generation (OpenRouter chat completions)
    generator_api_key: Optional[str] = None
    generator_model: str = "google/gemini-2.5-flash"
    generator_base_url: str = "https://openrouter.ai/api/v1/chat/completions"
    generator_max_tokens: int = 16000
    generator_timeout_seconds: float = 120.0

    @property
    def cors_origins(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.allowed_origins.split(",")]

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
