from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # App settings
    PROJECT_NAME: str = "TextExpenseTracker"
    API_PREFIX: str = "/api"
    DEBUG: bool = Field(default=False)
    LOG_LEVEL: str = Field(default="INFO")
    CORS_ORIGINS: List[str] = Field(default=["http://localhost:3000", "http://localhost:8000"])

    # Storage: "file" writes one JSON document per day, "dynamo" uses a DynamoDB table
    STORAGE_BACKEND: str = Field(default="file")
    DATA_DIR: str = Field(default="data")
    DYNAMO_REGION: str = Field(default="eu-west-1")
    DYNAMO_EXPENSES_TABLE: str = Field(default="text-expense-daily-records")

    # Hosted models (Hugging Face Inference API)
    AI_ENABLED: bool = Field(default=True)
    HF_API_URL: str = Field(default="https://api-inference.huggingface.co/models")
    HF_API_TOKEN: str = Field(default="")
    CLASSIFIER_MODEL: str = Field(default="distilbert-base-uncased-finetuned-sst-2-english")
    GENERATOR_MODEL: str = Field(default="google-t5/t5-small")
    AI_TIMEOUT_SECONDS: float = Field(default=10.0)
    GENERATION_MAX_LENGTH: int = Field(default=100)

    # Window used by GET /expenses, /insights and /analysis
    DEFAULT_WINDOW_DAYS: int = 30


settings = Settings()
