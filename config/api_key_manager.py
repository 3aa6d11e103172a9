import os
from typing import Dict, List, Optional

class APIKeyManager:
    """
    API Key Manager for LLM provider credentials.
    Parses comma-separated keys per provider and rotates through them
    independently, so a rate-limited DeepSeek key does not move the Gemini one.
    """

    def __init__(self):
        # Starting offset can be passed to subprocesses via env
        try:
            self._start = int(os.getenv('_KEY_SET_INDEX', '0'))
        except ValueError:
            self._start = 0

        self._keys: Dict[str, List[str]] = {}
        self._offsets: Dict[str, int] = {}

    def register(self, name: str, raw_value: Optional[str]) -> None:
        """
        Register a provider key variable, supporting comma-separated values.

        Args:
            name: Provider identifier (e.g., 'DEEPSEEK')
            raw_value: Raw string from environment (e.g., 'sk-1,sk-2')
        """
        if not raw_value:
            self._keys[name] = []
        else:
            self._keys[name] = [k.strip() for k in raw_value.split(',') if k.strip()]
        self._offsets[name] = self._start

    def get(self, name: str) -> Optional[str]:
        """Get the active key for a provider, or None if none is configured."""
        candidates = self._keys.get(name, [])
        if not candidates:
            return None
        return candidates[self._offsets.get(name, 0) % len(candidates)]

    def rotate(self, name: str) -> Optional[str]:
        """
        Advance the given provider to its next key.
        Returns the newly active key (None when nothing is registered).
        """
        self._offsets[name] = self._offsets.get(name, self._start) + 1
        return self.get(name)

    def has_key(self, name: str) -> bool:
        return len(self._keys.get(name, [])) > 0

    def get_key_count(self, name: str) -> int:
        """Get number of keys configured for a specific provider."""
        return len(self._keys.get(name, []))

    def all_keys(self) -> List[str]:
        """Every registered key, for log masking."""
        return [key for keys in self._keys.values() for key in keys]

    @property
    def providers(self) -> List[str]:
        """Providers with at least one key configured."""
        return [name for name, keys in self._keys.items() if keys]
