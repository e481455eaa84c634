"""Application configuration using pydantic-settings."""
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


# Tab names must match the spreadsheet exactly.
CLIENT_MASTER_SHEET = "Client_Master_Data"
SERVICE_LOG_SHEET = "Service_Log"
TASKS_SHEET = "Tasks"
PROCUREMENT_SHEET = "PROCUREMENT_MASTER"
MARKETING_SHEET = "Marketing_Queue"
CONFIG_SHEET = "Config"
INVOICES_SHEET = "Invoice_Tracker"

PLACEHOLDER_VALUES = {"", "PLACEHOLDER"}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    model_config = SettingsConfigDict(
        env_file=str(Path(__file__).resolve().parents[3] / ".env"),
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    log_level: str = "INFO"
    ahp_api_key: str = ""
    app_version: str = "1.0.0"

    # LLM (any OpenAI-compatible chat-completions endpoint)
    llm_api_key: str = ""
    llm_base_url: str | None = None
    llm_model: str = "gpt-4o"
    llm_temperature: float = 0.3
    llm_max_tokens: int = 4096
    llm_timeout_seconds: float = 60.0
    agent_max_iterations: int = 30

    # Google Sheets
    spreadsheet_id: str = ""
    procurement_spreadsheet_id: str = ""

    # Google OAuth (refresh-token flow) and sender identity
    google_client_id: str = ""
    google_client_secret: str = ""
    google_refresh_token: str = ""
    google_workspace_user: str = ""
    email_from_name: str = "Atlanta Houseplants"
    google_timeout_seconds: float = 30.0

    def spreadsheet_id_for(self, sheet_name: str) -> str:
        """Procurement lives in its own spreadsheet; every other tab in the main one."""
        if sheet_name == PROCUREMENT_SHEET:
            return (self.procurement_spreadsheet_id or "").strip() or self.spreadsheet_id
        return self.spreadsheet_id

    def google_configured(self) -> bool:
        return all(
            (value or "").strip() not in PLACEHOLDER_VALUES
            for value in (self.google_client_id, self.google_client_secret, self.google_refresh_token)
        )

    def llm_configured(self) -> bool:
        return (self.llm_api_key or "").strip() not in PLACEHOLDER_VALUES

    def api_key_configured(self) -> bool:
        return (self.ahp_api_key or "").strip() not in PLACEHOLDER_VALUES


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
