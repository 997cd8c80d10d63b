from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── LLM Provider ─────────────────────────────────────────────────────────
    # Options: "openai" (default) or "bedrock"
    llm_provider: str = "openai"

    # ── OpenAI ───────────────────────────────────────────────────────────────
    openai_api_key: str = ""
    openai_model_id: str = "gpt-4o-mini"
    openai_max_tokens: int = 800
    openai_temperature: float = 0.1
    chat_temperature: float = 0.7
    chat_max_tokens: int = 500

    # ── AWS Bedrock ──────────────────────────────────────────────────────────
    aws_default_region: str = "us-east-1"
    aws_access_key_id: str = ""
    aws_secret_access_key: str = ""
    aws_profile: str = ""
    bedrock_model_id: str = "anthropic.claude-3-5-sonnet-20241022-v2:0"
    bedrock_max_tokens: int = 800
    bedrock_temperature: float = 0.1

    # ── Shared LLM call limits ───────────────────────────────────────────────
    llm_timeout_seconds: float = 30.0
    llm_max_retries: int = 2

    # ── Zapier MCP (Jira) ────────────────────────────────────────────────────
    zapier_mcp_url: str = ""
    jira_create_tool: str = "jira_software_cloud_create_issue"
    jira_search_tool: str = "jira_software_cloud_find_issue"

    # ── Intake behaviour ──────────────────────────────────────────────────────
    confidence_threshold: float = 0.6
    max_reprompts: int = 3
    default_enum_fields: bool = True
    similarity_threshold: float = 0.3
    max_similar_issues: int = 5

    # ── Logging ──────────────────────────────────────────────────────────────
    log_level: str = "INFO"
    # "json" for log shippers, "console" for a readable stderr while chatting
    log_format: str = "json"
    activity_log_path: str = "logs/activity.jsonl"
    llm_log_path: str = "logs/llm_calls.jsonl"

    # ── Development ──────────────────────────────────────────────────────────
    dry_run: bool = False

    # ── Derived helpers ──────────────────────────────────────────────────────
    @property
    def active_model_id(self) -> str:
        if self.llm_provider.lower().strip() == "bedrock":
            return self.bedrock_model_id
        return self.openai_model_id


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
