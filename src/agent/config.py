"""Answer model configuration utilities.

Provides functions for loading LLM configuration from environment variables.
"""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic_ai.models.openai import OpenAIModel
from pydantic_ai.providers.openai import OpenAIProvider

# Check if we're in production
is_production = os.getenv("ENVIRONMENT") == "production"

if not is_production:
    # Development: prioritize .env file
    project_root = Path(__file__).resolve().parent.parent.parent
    dotenv_path = project_root / ".env"
    load_dotenv(dotenv_path, override=True)
else:
    # Production: use cloud platform env vars only
    load_dotenv()


def get_model() -> OpenAIModel:
    """Get the configured LLM model for answer generation.

    Reads configuration from environment variables:
    - LLM_CHOICE: Model name (default: gpt-4o-mini)
    - LLM_BASE_URL: API base URL (default: https://api.openai.com/v1)
    - LLM_API_KEY: API key (default: ollama for local testing)

    Returns:
        OpenAIModel configured with environment settings.

    Examples:
        >>> model = get_model()
        >>> # Uses gpt-4o-mini by default
    """
    llm = os.getenv("LLM_CHOICE") or "gpt-4o-mini"
    base_url = os.getenv("LLM_BASE_URL") or "https://api.openai.com/v1"
    api_key = os.getenv("LLM_API_KEY") or "ollama"

    return OpenAIModel(llm, provider=OpenAIProvider(base_url=base_url, api_key=api_key))


def get_temperature() -> float:
    """Get the sampling temperature for answers.

    Reads LLM_TEMPERATURE from environment (default: 0.2). A low value keeps
    answers close to the transcript context.

    Returns:
        Sampling temperature.
    """
    return float(os.getenv("LLM_TEMPERATURE", "0.2"))
