"""
Centralized constants for the application.
Stores LLM provider endpoints, models, timeouts and other magic numbers.
"""

from typing import Dict, Any

# --- LLM Request Defaults ---

LLM_TEMPERATURE = 0.7
LLM_MAX_TOKENS = 1500
LLM_TIMEOUT_SECONDS = 55           # Single request
LLM_PARALLEL_TIMEOUT_SECONDS = 45  # Fan-out (news + risk at once)
LLM_RETRIES = 1
LLM_RETRY_BACKOFF_SECONDS = 5

# --- Provider Configuration ---
# auth: 'bearer' -> Authorization header, 'x-api-key' -> Anthropic style,
#       'query' -> ?key= parameter (Gemini)
# shape: which response layout to read the completion text from

LLM_PROVIDERS: Dict[str, Dict[str, Any]] = {
    'deepseek': {
        'name': 'DeepSeek',
        'url': 'https://api.deepseek.com/v1/chat/completions',
        'model': 'deepseek-chat',
        'auth': 'bearer',
        'shape': 'chat',
        'settings_key': 'DEEPSEEK',
    },
    'gpt': {
        'name': 'OpenAI',
        'url': 'https://api.openai.com/v1/chat/completions',
        'model': 'gpt-3.5-turbo',
        'auth': 'bearer',
        'shape': 'chat',
        'settings_key': 'OPENAI',
    },
    'gemini': {
        'name': 'Gemini',
        'url': 'https://generativelanguage.googleapis.com/v1/models/gemini-pro:generateContent',
        'model': 'gemini-pro',
        'auth': 'query',
        'shape': 'gemini',
        'settings_key': 'GEMINI',
    },
    'claude': {
        'name': 'Claude',
        'url': 'https://api.anthropic.com/v1/messages',
        'model': 'claude-3-sonnet-20240229',
        'auth': 'x-api-key',
        'shape': 'anthropic',
        'settings_key': 'CLAUDE',
        'api_version': '2023-06-01',
    },
    'grok': {
        'name': 'Grok',
        'url': 'https://api.x.ai/v1/chat/completions',
        'model': 'grok-beta',
        'auth': 'bearer',
        'shape': 'chat',
        'settings_key': 'GROK',
    },
}

DEFAULT_PLATFORM = 'deepseek'

# Connectivity probe
CONNECTION_TEST_PROMPT = "請回覆「連線成功」四個字。"
CONNECTION_TEST_MAX_TOKENS = 20

# --- Output ---
DATA_REPORTS = "generated_reports"  # Saved formatted analyses
