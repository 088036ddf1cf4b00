import copy
import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from res_translator.logger import get_logger

logger = get_logger(__name__)

# Translation configuration constants
DEFAULT_BATCH_SIZE = 50  # Maximum scalar entries per request
DEFAULT_MAX_RETRIES = 5  # Retries per batch before a language is abandoned
DEFAULT_RETRY_DELAY = 1.0  # Seconds between retries (request rate limit)
DEFAULT_SOURCE_LANGUAGE = "en"
DEFAULT_SYSTEM_MESSAGE = "You are a professional translator of mobile app strings. Return only valid JSON."

PLACEHOLDER_API_KEY = "YOUR_API_KEY_HERE"


def get_app_home() -> Path:
    """Directory holding config/ and logs/ (RES_TRANSLATOR_HOME, default: working directory)."""
    return Path(os.environ.get("RES_TRANSLATOR_HOME") or Path.cwd())


def get_config_file() -> Path:
    return get_app_home() / "config" / "config.json"


# Default prompts
DEFAULT_PROMPTS = {
    "line_translation_prompt": {
        "version": "1.0",
        "description": "Line-aligned translation prompt for chat-model engines",
        "prompt": """You are a professional translator specializing in Android app string resources.

Translate each string from {source_language_name} ({source_language_code}) to {target_language_name} ({target_language_code}). Return ONLY a JSON array with the translated strings in the same order.

CRITICAL REQUIREMENTS:
- Preserve format specifiers EXACTLY as they appear: %s, %d, %1$s, %2$d, etc.
- Keep empty strings empty
- Return exactly {text_count} translated strings

Array to translate:
{texts_json}

Return format: ["translated1", "translated2", ...]
Do not include explanations, markdown code blocks, or any text outside the JSON array. Return ONLY the JSON array."""
    }
}

# Default configuration template
DEFAULT_CONFIG = {
    "engine": "baidu",
    "baidu": {
        "app_id": "",
        "secret": "",
        "timeout": 60,
        "api_url": "https://fanyi-api.baidu.com/api/trans/vip/translate"
    },
    "google": {
        "api_key": PLACEHOLDER_API_KEY,
        "timeout": 60,
        "api_url": "https://translation.googleapis.com/language/translate/v2"
    },
    "openai": {
        "api_key": PLACEHOLDER_API_KEY,
        "models": ["gpt-4o-mini", "gpt-4o"],  # First is default
        "timeout": 120,
        "api_url": "https://api.openai.com/v1/chat/completions"
    },
    "deepseek": {
        "api_key": PLACEHOLDER_API_KEY,
        "models": ["deepseek-chat"],
        "timeout": 120,
        "api_url": "https://api.deepseek.com/chat/completions"
    },
    "gemini": {
        "api_key": PLACEHOLDER_API_KEY,
        "models": ["gemini-2.5-flash"],
        "timeout": 120,
        "api_url": "https://generativelanguage.googleapis.com/v1beta/openai/chat/completions"
    },
    "translation": {
        "source_language": DEFAULT_SOURCE_LANGUAGE,
        "batch_size": DEFAULT_BATCH_SIZE,
        "max_retries": DEFAULT_MAX_RETRIES,
        "retry_delay": DEFAULT_RETRY_DELAY,
        "backoff": "fixed",  # fixed|exponential
        "filter_rules": []  # e.g. {"type": "starts_with", "value": "app_name"}
    },
    "log_mode": "off"
}


def _merge_defaults(defaults: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Overlay a loaded config on the defaults, one level of sections deep."""
    merged = copy.deepcopy(defaults)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key].update(value)
        else:
            merged[key] = value
    return merged


def ensure_config_directory(config_file: Optional[Path] = None):
    """Ensure the config directory exists."""
    config_dir = (config_file or get_config_file()).parent
    config_dir.mkdir(parents=True, exist_ok=True)
    logger.debug(f"Config directory ensured: {config_dir}")


def create_default_config(config_file: Optional[Path] = None) -> Path:
    """Create the default config.json file."""
    config_file = Path(config_file) if config_file else get_config_file()
    ensure_config_directory(config_file)
    with open(config_file, 'w', encoding='utf-8') as f:
        json.dump(DEFAULT_CONFIG, f, indent=4, ensure_ascii=False)
    logger.info(f"Created default config file: {config_file}")
    return config_file


def load_config(config_file: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load the configuration file merged over the defaults.

    A missing or unreadable file yields the default configuration.
    """
    config_file = Path(config_file) if config_file else get_config_file()
    if not config_file.exists():
        logger.debug(f"No config file at {config_file}, using defaults")
        return copy.deepcopy(DEFAULT_CONFIG)

    try:
        with open(config_file, 'r', encoding='utf-8') as f:
            loaded = json.load(f)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse config file {config_file}: {e}")
        logger.warning("Using default configuration")
        return copy.deepcopy(DEFAULT_CONFIG)
    except OSError as e:
        logger.error(f"Failed to read config file {config_file}: {e}")
        logger.warning("Using default configuration")
        return copy.deepcopy(DEFAULT_CONFIG)

    if not isinstance(loaded, dict):
        logger.warning(f"Config file {config_file} does not contain an object, using defaults")
        return copy.deepcopy(DEFAULT_CONFIG)

    logger.debug(f"Configuration loaded from {config_file}")
    return _merge_defaults(DEFAULT_CONFIG, loaded)


def save_config(config: Dict[str, Any], config_file: Optional[Path] = None):
    """Save the configuration file."""
    config_file = Path(config_file) if config_file else get_config_file()
    ensure_config_directory(config_file)
    try:
        with open(config_file, 'w', encoding='utf-8') as f:
            json.dump(config, f, indent=4, ensure_ascii=False)
        logger.info(f"Configuration saved to {config_file}")
    except OSError as e:
        logger.error(f"Failed to save config to {config_file}: {e}")
        raise

    from res_translator.logger import _clear_log_mode_cache
    _clear_log_mode_cache()


def get_translation_config(config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Translation section of the config with defaults filled in."""
    config = config if config is not None else load_config()
    return _merge_defaults(DEFAULT_CONFIG["translation"], config.get("translation") or {})


def get_filter_rules(config: Optional[Dict[str, Any]] = None) -> List:
    """Configured filter rules; nothing configured means the default rules."""
    from res_translator.resources.filters import rules_from_config

    translation_config = (config if config is not None else load_config()).get("translation") or {}
    return rules_from_config(translation_config.get("filter_rules"))


def get_prompt(prompt_name: str = "line_translation_prompt") -> Dict[str, Any]:
    """Get a specific prompt by name."""
    return DEFAULT_PROMPTS.get(prompt_name, DEFAULT_PROMPTS["line_translation_prompt"])
