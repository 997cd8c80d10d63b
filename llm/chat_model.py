from __future__ import annotations

from functools import lru_cache

from langchain_core.language_models import BaseChatModel

from config.settings import settings

SUPPORTED_PROVIDERS = ("openai", "bedrock")


@lru_cache(maxsize=2)
def get_llm(temperature: float | None = None, max_tokens: int | None = None) -> BaseChatModel:
    """
    Chat model for the given sampling settings, built once per pair.

    LLM_PROVIDER picks the backend: "openai" (default) or "bedrock"
    (Claude on AWS Bedrock). None falls back to the provider's configured
    temperature / token limit, which suits parameter extraction; the chat
    agent asks for a warmer, shorter model.
    """
    provider = settings.llm_provider.lower().strip()
    if provider not in SUPPORTED_PROVIDERS:
        raise ValueError(
            f"Unknown LLM_PROVIDER {settings.llm_provider!r}; expected one of {SUPPORTED_PROVIDERS}"
        )

    if provider == "bedrock":
        return _build_bedrock(
            settings.bedrock_temperature if temperature is None else temperature,
            max_tokens or settings.bedrock_max_tokens,
        )
    return _build_openai(
        settings.openai_temperature if temperature is None else temperature,
        max_tokens or settings.openai_max_tokens,
    )


def _build_openai(temperature: float, max_tokens: int) -> BaseChatModel:
    from langchain_openai import ChatOpenAI

    if not settings.openai_api_key:
        raise ValueError(
            "LLM_PROVIDER=openai but OPENAI_API_KEY is not set. "
            "Add it to your .env file."
        )

    return ChatOpenAI(
        model=settings.openai_model_id,
        api_key=settings.openai_api_key,
        temperature=temperature,
        max_tokens=max_tokens,
        timeout=settings.llm_timeout_seconds,
        max_retries=settings.llm_max_retries,
    )


def _bedrock_session():
    """boto3 session preferring .env credentials over cached SSO sessions in ~/.aws/."""
    import boto3

    if settings.aws_profile:
        return boto3.Session(profile_name=settings.aws_profile)
    if settings.aws_access_key_id and settings.aws_secret_access_key:
        return boto3.Session(
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
            region_name=settings.aws_default_region,
        )
    return boto3.Session()


def _build_bedrock(temperature: float, max_tokens: int) -> BaseChatModel:
    from botocore.config import Config
    from langchain_aws import ChatBedrock

    # A user is waiting on every call; fail fast rather than hang the turn
    client = _bedrock_session().client(
        "bedrock-runtime",
        region_name=settings.aws_default_region,
        config=Config(
            read_timeout=settings.llm_timeout_seconds,
            retries={"max_attempts": settings.llm_max_retries + 1, "mode": "standard"},
        ),
    )

    return ChatBedrock(
        model_id=settings.bedrock_model_id,
        region_name=settings.aws_default_region,
        client=client,
        model_kwargs={
            "temperature": temperature,
            "max_tokens": max_tokens,
            "anthropic_version": "bedrock-2023-05-31",
        },
    )
