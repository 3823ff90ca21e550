"""
Configuration settings for Feedlens.

This module provides a centralized configuration loaded from environment
variables or a .env file. Components take a Settings instance at
construction; the module-level ``settings`` is the default.
"""

import os
from typing import Dict, Optional, List

from dotenv import load_dotenv
from pydantic_settings import BaseSettings
from pydantic import ConfigDict

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """
    Application settings.

    Load configuration from environment variables or .env file.
    """
    # Language model configuration (any OpenAI-compatible endpoint)
    openai_api_key: str = os.getenv("OPENAI_API_KEY", "")
    openai_base_url: Optional[str] = os.getenv("OPENAI_BASE_URL") or None
    llm_model: str = os.getenv("LLM_MODEL", "gpt-4o-mini")
    llm_temperature: float = float(os.getenv("LLM_TEMPERATURE", "0.2"))
    llm_timeout_seconds: Optional[float] = (
        float(os.getenv("LLM_TIMEOUT_SECONDS")) if os.getenv("LLM_TIMEOUT_SECONDS") else None
    )

    # Output budgets per prompt
    analysis_max_tokens: int = int(os.getenv("ANALYSIS_MAX_TOKENS", "150"))
    summary_max_tokens: int = int(os.getenv("SUMMARY_MAX_TOKENS", "300"))
    digest_max_tokens: int = int(os.getenv("DIGEST_MAX_TOKENS", "200"))

    # Reject sentiment/urgency values outside their enumerations
    strict_analysis_validation: bool = os.getenv("STRICT_ANALYSIS_VALIDATION", "True").lower() == "true"

    # Storage
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///data/feedlens.db")

    # Digest delivery
    discord_webhook_url: Optional[str] = os.getenv("DISCORD_WEBHOOK_URL") or None
    digest_row_limit: int = int(os.getenv("DIGEST_ROW_LIMIT", "20"))

    # Workflow runtime and scheduling
    enable_scheduler: bool = os.getenv("ENABLE_SCHEDULER", "False").lower() == "true"
    digest_cron: str = os.getenv("DIGEST_CRON", "0 9 * * *")
    workflow_step_retries: int = int(os.getenv("WORKFLOW_STEP_RETRIES", "3"))

    # API Gateway settings
    api_gateway_host: str = os.getenv("API_GATEWAY_HOST", "0.0.0.0")
    api_gateway_port: int = int(os.getenv("API_GATEWAY_PORT", "8000"))

    # Development mode
    debug: bool = os.getenv("DEBUG", "False").lower() == "true"

    # Logging settings
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: Optional[str] = os.getenv("LOG_FILE", None)
    enable_file_logging: bool = os.getenv("ENABLE_FILE_LOGGING", "False").lower() == "true"

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    def validate_api_keys(self) -> List[str]:
        """
        Validate that required API keys are present.

        Returns:
            List of missing API keys
        """
        missing_keys = []

        # A local OpenAI-compatible server may not need a key
        if not self.openai_api_key and not self.openai_base_url:
            missing_keys.append("OPENAI_API_KEY")

        return missing_keys

    def validate_settings(self) -> Dict[str, str]:
        """
        Validate all settings and return any warnings.

        Returns:
            Dictionary of validation messages
        """
        validation_messages = {}

        missing_keys = self.validate_api_keys()
        if missing_keys:
            validation_messages["missing_api_keys"] = f"Missing required API keys: {', '.join(missing_keys)}"

        if not self.discord_webhook_url:
            validation_messages["discord_webhook"] = "DISCORD_WEBHOOK_URL is not set, digests will not be delivered"

        if self.digest_row_limit < 1:
            validation_messages["digest_row_limit"] = "DIGEST_ROW_LIMIT must be at least 1"

        return validation_messages

    def configure_logging(self) -> None:
        """Configure logging based on settings."""
        import logging

        log_level = getattr(logging, self.log_level.upper(), logging.INFO)

        logging_config = {
            'level': log_level,
            'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            'datefmt': '%Y-%m-%d %H:%M:%S',
        }

        if self.enable_file_logging and self.log_file:
            logging_config['filename'] = self.log_file
            logging_config['filemode'] = 'a'

        logging.basicConfig(**logging_config)

        # Reduce noise from client libraries
        for noisy in ("openai", "httpx", "aiohttp", "apscheduler", "uvicorn.access"):
            logging.getLogger(noisy).setLevel(logging.WARNING)


# Create a global settings instance
settings = Settings()

settings.configure_logging()


def print_settings(include_secrets: bool = False, current: Optional[Settings] = None) -> str:
    """
    Generate a printable string of current settings.

    Args:
        include_secrets: Whether to include secret values like API keys
        current: Settings to print (defaults to the global instance)

    Returns:
        String representation of settings
    """
    secret_fields = {"openai_api_key", "discord_webhook_url"}

    lines = ["Current Settings:"]

    settings_dict = (current or settings).model_dump()

    for key, value in sorted(settings_dict.items()):
        if key in secret_fields and not include_secrets:
            if value:
                value = f"{'*' * 8}{value[-4:]}" if isinstance(value, str) and len(value) > 4 else "********"
            else:
                value = "Not set"

        lines.append(f"  {key}: {value}")

    return "\n".join(lines)


def validate_environment(current: Optional[Settings] = None) -> None:
    """
    Validate the environment and log any warnings.
    """
    import logging
    logger = logging.getLogger(__name__)

    validation_messages = (current or settings).validate_settings()

    if validation_messages:
        logger.warning("Environment validation found issues:")
        for category, message in validation_messages.items():
            logger.warning(f"  {category}: {message}")
    else:
        logger.info("Environment validation: All checks passed")
