from pydantic_settings import BaseSettings
from pydantic import Field
from typing import Literal
import os


class Config(BaseSettings):
    # Database Configuration
    db_url: str = Field(default="sqlite+aiosqlite:///./zapfin.db", alias="DB_URL")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # WhatsApp Configuration
    wa_access_token: str = Field(default="", alias="WA_ACCESS_TOKEN")
    wa_phone_number_id: str = Field(default="", alias="WA_PHONE_NUMBER_ID")
    wa_send_replies: bool = Field(default=False, alias="WA_SEND_REPLIES")

    # LLM (Language Model) Configuration
    llm_provider: Literal["gemini", "groq"] = Field(default="gemini", alias="LLM_PROVIDER")
    gemini_key: str = Field(default="", alias="GEMINI_API_KEY")
    gemini_model_name: str = Field(default="gemini-1.5-flash", alias="GEMINI_MODEL_NAME")
    groq_api_key: str = Field(default="", alias="GROQ_API_KEY")
    groq_model_name: str = Field(default="llama-3.3-70b-versatile", alias="GROQ_MODEL_NAME")
    llm_timeout: float = Field(default=30.0, alias="LLM_TIMEOUT")
    llm_retry_delay: float = Field(default=1.0, alias="LLM_RETRY_DELAY")

    # Extraction limits
    max_message_length: int = Field(default=2000, alias="MAX_MESSAGE_LENGTH")
    max_advisory_length: int = Field(default=1000, alias="MAX_ADVISORY_LENGTH")

    is_production: bool = os.getenv("ENVIRONMENT", "development").lower() == "production"

    # Path to .env file (for loading env vars)
    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        populate_by_name = True


# Instantiate the settings
config = Config()
