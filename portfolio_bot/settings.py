# portfolio_bot/settings.py
import os
from typing import List, Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from portfolio_bot.errors import ConfigurationError


class Settings(BaseSettings):
    # core
    APP_NAME: str = Field(default="Portfolio Bot")
    ENV: str = Field(default=os.getenv("APP_ENV", "dev"))
    DEBUG: bool = Field(default=True)
    LOG_LEVEL: Optional[str] = None

    # model provider (embeddings + generation)
    LLM_PROVIDER: Literal["gemini", "openai", "ollama", "echo"] = "gemini"
    GEMINI_API_KEY: Optional[str] = None
    OPENAI_API_KEY: Optional[str] = None
    OLLAMA_HOST: str = "http://localhost:11434"
    EMBEDDING_MODEL: Optional[str] = None
    GENERATION_MODEL: Optional[str] = None
    MAX_OUTPUT_TOKENS: int = 500
    TEMPERATURE: float = 0.7

    # vector store
    VECTOR_STORE: Literal["astra", "faiss"] = "astra"
    ASTRA_DB_NAMESPACE: Optional[str] = None
    ASTRA_DB_COLLECTION: Optional[str] = None
    ASTRA_DB_API_ENDPOINT: Optional[str] = None
    ASTRA_DB_APPLICATION_TOKEN: Optional[str] = None
    FAISS_DIR: str = "data/index"
    VECTOR_DIMENSION: int = 768

    # retrieval / pipeline
    TOP_K: int = 5
    FALLBACK_FETCH_LIMIT: int = 3
    MIN_REQUEST_INTERVAL_MS: int = 2000
    PROVIDER_TIMEOUT_SECONDS: float = 30.0
    MAX_CONTEXT_CHARS: int = 8000
    MAX_QUESTION_CHARS: int = 2000
    PERSONA_KEY: str = "prince-pal"

    # ingestion
    INGEST_SOURCES: List[str] = Field(default_factory=lambda: [
        "https://github.com/princepal9120",
        "https://x.com/prince_twets",
        "https://drive.google.com/file/d/19Pu--0GUaPw2FlYsZHRD6ctjOOi9a7oa/view",
        "https://docs.google.com/document/d/1D7znZCeXbn1V2qP_HOGmATY-PC8V-2fZ-zQxje25rWc/edit?usp=sharing",
    ])
    CHUNK_SIZE: int = 512
    CHUNK_OVERLAP: int = 100

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.dev"),
        extra="ignore",
    )

    @property
    def app_name(self) -> str:
        return self.APP_NAME

    @property
    def min_request_interval(self) -> float:
        return self.MIN_REQUEST_INTERVAL_MS / 1000.0

    def missing_required(self) -> List[str]:
        """Names of required options left unset for the chosen provider and store."""
        required: List[str] = []
        if self.LLM_PROVIDER == "gemini":
            required.append("GEMINI_API_KEY")
        elif self.LLM_PROVIDER == "openai":
            required.append("OPENAI_API_KEY")
        if self.VECTOR_STORE == "astra":
            required += [
                "ASTRA_DB_NAMESPACE",
                "ASTRA_DB_COLLECTION",
                "ASTRA_DB_API_ENDPOINT",
                "ASTRA_DB_APPLICATION_TOKEN",
            ]
        return [name for name in required if not getattr(self, name)]

    def require_complete(self) -> "Settings":
        missing = self.missing_required()
        if missing:
            raise ConfigurationError(f"Missing required configuration: {', '.join(missing)}")
        return self


settings = Settings()
