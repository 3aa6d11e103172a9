"""
LLM Client Module
=================

Infrastructure layer for the chat-completion providers (DeepSeek, OpenAI,
Gemini, Claude, Grok). Handles authentication, request shapes, retries and
error classification. Agnostic to the content being generated.
"""

import time
from typing import Any, Dict, Optional, Tuple

import requests

from config.constants import (
    CONNECTION_TEST_MAX_TOKENS,
    CONNECTION_TEST_PROMPT,
    LLM_MAX_TOKENS,
    LLM_PROVIDERS,
    LLM_RETRIES,
    LLM_RETRY_BACKOFF_SECONDS,
    LLM_TEMPERATURE,
    LLM_TIMEOUT_SECONDS,
)
from config.settings import settings
from utils.logger import mask_secrets, setup_logger

logger = setup_logger('llm_client')


class LLMClientError(Exception):
    """Base error for provider calls. `user_message` is safe to show end users."""
    user_message = '分析失敗'

    def __init__(self, message: str, platform: str = ''):
        super().__init__(message)
        self.platform = platform


class LLMAuthError(LLMClientError):
    user_message = 'API Key 無效或已過期'


class LLMRateLimitError(LLMClientError):
    user_message = 'API 配額已用盡'


class LLMTimeoutError(LLMClientError):
    user_message = '請求超時'


class LLMConnectionError(LLMClientError):
    user_message = '網絡連線失敗'


class LLMResponseError(LLMClientError):
    user_message = 'AI 回應格式錯誤'


def supported_platforms() -> Tuple[str, ...]:
    return tuple(LLM_PROVIDERS)


class LLMClient:
    """
    Client for one chat-completion provider.
    """

    def __init__(
        self,
        platform: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: float = LLM_TIMEOUT_SECONDS
    ):
        self.platform = (platform or settings.default_platform).lower()
        if self.platform not in LLM_PROVIDERS:
            raise ValueError(f"不支持的AI平台: {platform}")

        self.provider = LLM_PROVIDERS[self.platform]
        self._explicit_key = api_key
        self.timeout = timeout

        if not self._explicit_key and not settings.has_api_key(self.provider['settings_key']):
            logger.warning(f"{self.provider['name']} API key not provided. Requests will fail until one is set.")

    @property
    def api_key(self) -> Optional[str]:
        return self._explicit_key or settings.get_api_key(self.provider['settings_key'])

    def complete(
        self,
        prompt: str,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        max_tokens: int = LLM_MAX_TOKENS
    ) -> str:
        """
        Send a single-turn prompt and return the raw completion text.

        Raises:
            LLMClientError subclass describing the failure
        """
        name = self.provider['name']
        key = api_key or self.api_key
        if not key:
            raise LLMAuthError(f"{name} API key missing", self.platform)

        timeout = timeout or self.timeout
        logger.info(f"Sending request to {name} (prompt {len(prompt)} chars, timeout {timeout}s)")

        for attempt in range(LLM_RETRIES + 1):
            url, headers, params, payload = self._build_request(prompt, key, max_tokens)
            try:
                response = requests.post(url, headers=headers, params=params, json=payload, timeout=timeout)
            except requests.exceptions.Timeout as e:
                raise LLMTimeoutError(f"{name} request timed out after {timeout}s", self.platform) from e
            except requests.exceptions.RequestException as e:
                raise LLMConnectionError(f"{name} connection error: {e}", self.platform) from e

            if response.status_code == 200:
                return self._extract_text(response)

            # Retry on Rate Limit (429) or Service Unavailable (503)
            if response.status_code in (429, 503) and attempt < LLM_RETRIES:
                if response.status_code == 429 and api_key is None and self._explicit_key is None:
                    # Several configured keys: move to the next one before retrying
                    if settings.get_key_count(self.provider['settings_key']) > 1:
                        key = settings.rotate_key(self.provider['settings_key'])
                wait_time = LLM_RETRY_BACKOFF_SECONDS * (attempt + 1)
                logger.warning(f"{name} returned {response.status_code}. Retrying in {wait_time}s...")
                time.sleep(wait_time)
                continue

            raise self._error_for(response)

        raise LLMClientError(f"{name} request failed after {LLM_RETRIES} retries", self.platform)

    def _build_request(
        self,
        prompt: str,
        key: str,
        max_tokens: int
    ) -> Tuple[str, Dict[str, str], Dict[str, str], Dict[str, Any]]:
        provider = self.provider
        headers = {'Content-Type': 'application/json'}
        params: Dict[str, str] = {}

        if provider['auth'] == 'bearer':
            headers['Authorization'] = f"Bearer {key}"
        elif provider['auth'] == 'x-api-key':
            headers['x-api-key'] = key
            headers['anthropic-version'] = provider['api_version']
        else:
            params['key'] = key

        if provider['shape'] == 'gemini':
            payload = {
                'contents': [{'parts': [{'text': prompt}]}],
                'generationConfig': {
                    'temperature': LLM_TEMPERATURE,
                    'maxOutputTokens': max_tokens,
                },
            }
        elif provider['shape'] == 'anthropic':
            payload = {
                'model': provider['model'],
                'max_tokens': max_tokens,
                'temperature': LLM_TEMPERATURE,
                'messages': [{'role': 'user', 'content': prompt}],
            }
        else:
            payload = {
                'model': provider['model'],
                'messages': [{'role': 'user', 'content': prompt}],
                'temperature': LLM_TEMPERATURE,
                'max_tokens': max_tokens,
                'stream': False,
            }
        return provider['url'], headers, params, payload

    def _extract_text(self, response: requests.Response) -> str:
        """Pull the completion text out of the provider's response layout."""
        name = self.provider['name']
        try:
            data = response.json()
        except ValueError as e:
            raise LLMResponseError(f"{name} returned invalid JSON", self.platform) from e

        try:
            shape = self.provider['shape']
            if shape == 'gemini':
                text = data['candidates'][0]['content']['parts'][0]['text']
            elif shape == 'anthropic':
                text = data['content'][0]['text']
            else:
                text = data['choices'][0]['message']['content']
        except (KeyError, IndexError, TypeError) as e:
            raise LLMResponseError(f"{name} response missing completion text", self.platform) from e

        if not text:
            raise LLMResponseError(f"{name} returned an empty completion", self.platform)

        logger.info(f"{name} response received ({len(text)} chars)")
        return text

    def _error_for(self, response: requests.Response) -> LLMClientError:
        name = self.provider['name']
        status = response.status_code
        detail = mask_secrets(response.text[:200])
        logger.warning(f"API Error {name} ({status}): {detail}")

        if status in (401, 403):
            return LLMAuthError(f"{name} API key invalid or unauthorized ({status})", self.platform)
        if status == 429:
            return LLMRateLimitError(f"{name} rate limit or quota exceeded", self.platform)
        if status >= 500:
            return LLMClientError(f"{name} server error {status}", self.platform)
        return LLMClientError(f"{name} API error {status}: {detail}", self.platform)


def check_connection(platform: str, api_key: Optional[str] = None) -> Dict[str, Any]:
    """
    Verify a provider key with a tiny prompt.

    Returns:
        {'success': bool, 'platform': str, 'message': str}
    """
    try:
        client = LLMClient(platform, api_key=api_key)
        reply = client.complete(CONNECTION_TEST_PROMPT, max_tokens=CONNECTION_TEST_MAX_TOKENS)
    except LLMClientError as e:
        logger.warning(f"Connection test for {platform} failed: {e}")
        return {'success': False, 'platform': platform, 'message': e.user_message}
    except ValueError as e:
        return {'success': False, 'platform': platform, 'message': str(e)}

    return {'success': True, 'platform': platform, 'message': reply.strip()}
