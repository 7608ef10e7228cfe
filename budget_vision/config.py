from dataclasses import dataclass
from typing import Optional
import os
from dotenv import load_dotenv

from budget_vision.constants import (
    DEFAULT_CACHE_TTL_HOURS,
    DEFAULT_LOG_LEVEL,
    DEFAULT_MAX_RETRY_ATTEMPTS,
    DEFAULT_QUOTA_LIMIT,
    DEFAULT_REMOTE_TIMEOUT,
    DEFAULT_RETRY_BASE_DELAY,
)
from budget_vision.errors import InitializationError


def _parse_number(name: str, raw: str, cast: type) -> int | float:
    try:
        return cast(raw)
    except ValueError:
        raise InitializationError(f"{name} must be a number, got {raw!r}") from None


@dataclass(frozen=True)
class Config:
    anthropic_api_key: Optional[str]
    openai_api_key: Optional[str]
    log_level: str
    quota_limit: int
    cache_ttl_hours: float
    max_retry_attempts: int
    retry_base_delay: float
    remote_timeout: float

    @classmethod
    def from_env(cls) -> "Config":
        load_dotenv()

        anthropic_api_key = os.getenv("ANTHROPIC_API_KEY") or None
        openai_api_key = os.getenv("OPENAI_API_KEY") or None
        log_level = os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL)
        quota_limit = os.getenv("QUOTA_LIMIT", str(DEFAULT_QUOTA_LIMIT))
        cache_ttl_hours = os.getenv("CACHE_TTL_HOURS", str(DEFAULT_CACHE_TTL_HOURS))
        max_retry_attempts = os.getenv("MAX_RETRY_ATTEMPTS", str(DEFAULT_MAX_RETRY_ATTEMPTS))
        retry_base_delay = os.getenv("RETRY_BASE_DELAY", str(DEFAULT_RETRY_BASE_DELAY))
        remote_timeout = os.getenv("REMOTE_TIMEOUT", str(DEFAULT_REMOTE_TIMEOUT))

        return cls._validate(
            anthropic_api_key=anthropic_api_key,
            openai_api_key=openai_api_key,
            log_level=log_level,
            quota_limit=_parse_number("QUOTA_LIMIT", quota_limit, int),
            cache_ttl_hours=_parse_number("CACHE_TTL_HOURS", cache_ttl_hours, float),
            max_retry_attempts=_parse_number("MAX_RETRY_ATTEMPTS", max_retry_attempts, int),
            retry_base_delay=_parse_number("RETRY_BASE_DELAY", retry_base_delay, float),
            remote_timeout=_parse_number("REMOTE_TIMEOUT", remote_timeout, float),
        )

    @staticmethod
    def _validate(
        anthropic_api_key: Optional[str],
        openai_api_key: Optional[str],
        log_level: str,
        quota_limit: int,
        cache_ttl_hours: float,
        max_retry_attempts: int,
        retry_base_delay: float,
        remote_timeout: float,
    ) -> "Config":
        match (anthropic_api_key, openai_api_key):
            case (None | "", None | ""):
                raise InitializationError(
                    "ANTHROPIC_API_KEY or OPENAI_API_KEY must be set in .env"
                )
            case _:
                pass

        positives = {
            "QUOTA_LIMIT": quota_limit,
            "CACHE_TTL_HOURS": cache_ttl_hours,
            "MAX_RETRY_ATTEMPTS": max_retry_attempts,
            "REMOTE_TIMEOUT": remote_timeout,
        }
        for name, value in positives.items():
            if value <= 0:
                raise InitializationError(f"{name} must be positive, got {value}")

        if retry_base_delay < 0:
            raise InitializationError(
                f"RETRY_BASE_DELAY must not be negative, got {retry_base_delay}"
            )

        return Config(
            anthropic_api_key=anthropic_api_key,
            openai_api_key=openai_api_key,
            log_level=log_level,
            quota_limit=quota_limit,
            cache_ttl_hours=cache_ttl_hours,
            max_retry_attempts=max_retry_attempts,
            retry_base_delay=retry_base_delay,
            remote_timeout=remote_timeout,
        )
