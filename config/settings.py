"""
Configuration settings loader with secure API key management.
Loads environment variables from .env file and provides masked logging.
Each LLM provider may list several comma-separated keys for rotation.
"""

import os
from pathlib import Path
from typing import List, Optional
from dotenv import load_dotenv
from .api_key_manager import APIKeyManager
from .constants import DEFAULT_PLATFORM

# Load environment variables from .env
project_root = Path(__file__).parent.parent
env_path = project_root / '.env'
load_dotenv(dotenv_path=env_path)


class Settings:
    """Application settings with secure API key handling and rotation support."""

    # settings key -> environment variable
    PROVIDER_ENV_VARS = {
        'DEEPSEEK': 'DEEPSEEK_API_KEY',
        'OPENAI': 'OPENAI_API_KEY',
        'GEMINI': 'GEMINI_API_KEY',
        'CLAUDE': 'CLAUDE_API_KEY',
        'GROK': 'GROK_API_KEY',
    }

    def __init__(self):
        self.manager = APIKeyManager()

        # No provider is mandatory: keys may also be passed per request
        for name, env_var in self.PROVIDER_ENV_VARS.items():
            self.manager.register(name, os.getenv(env_var))

        self.default_platform = os.getenv('AI_PLATFORM', DEFAULT_PLATFORM).lower()
        self.reports_dir = os.getenv('AI_REPORTS_DIR')

    def get_api_key(self, settings_key: str) -> Optional[str]:
        """Current key for a provider (e.g. 'DEEPSEEK'), or None."""
        return self.manager.get(settings_key)

    def rotate_key(self, settings_key: str) -> Optional[str]:
        """
        Move a provider to its next configured key.
        Used after a 429 when several keys are configured.
        """
        return self.manager.rotate(settings_key)

    def get_key_count(self, settings_key: str) -> int:
        """Get number of keys configured for a specific provider."""
        return self.manager.get_key_count(settings_key)

    def has_api_key(self, settings_key: str) -> bool:
        return self.manager.has_key(settings_key)

    def configured_providers(self) -> List[str]:
        """Settings keys (e.g. 'GEMINI') with at least one key in the environment."""
        return self.manager.providers

    def configured_keys(self) -> List[str]:
        return self.manager.all_keys()

    # --- Helpers ---

    @staticmethod
    def mask_api_key(api_key: Optional[str]) -> str:
        """
        Mask API key for secure logging.
        Shows only first 4 and last 4 characters.

        Args:
            api_key: The API key to mask

        Returns:
            Masked API key (e.g., 'sk-a...I4ha')
        """
        if not api_key or len(api_key) < 8:
            return "****"
        return f"{api_key[:4]}...{api_key[-4:]}"


# Global settings instance
settings = Settings()
