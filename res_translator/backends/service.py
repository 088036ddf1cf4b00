"""
Translation Service Module

This module provides the concrete translation backend:
- TranslationService: one engine from the fixed EngineType set
- Configuration validation (fails before any network request)

For engine-specific API calls, see backends/providers.py
"""

from typing import Any, Dict, List, Optional, Union

import httpx

from res_translator.config import DEFAULT_SYSTEM_MESSAGE, PLACEHOLDER_API_KEY, load_config
from res_translator.logger import get_logger
from res_translator.backends.base import CHAT_ENGINES, EngineType, TranslationBackend
from res_translator.backends.exceptions import BackendFailure, ConfigurationError

logger = get_logger(__name__)


def _is_placeholder(value: Any) -> bool:
    return not value or value == PLACEHOLDER_API_KEY


def validate_backend_config(engine: Union[EngineType, str], config: Optional[Dict[str, Any]] = None) -> None:
    """
    Validate that an engine is configured.

    Raises:
        ConfigurationError: If credentials or model are missing, with code and details.
    """
    if isinstance(engine, str):
        engine = EngineType.from_name(engine)
    config = config if config is not None else load_config()
    provider_config = config.get(engine.value) or {}

    if engine == EngineType.BAIDU:
        missing = [name for name in ('app_id', 'secret') if _is_placeholder(provider_config.get(name))]
        if missing:
            raise ConfigurationError(
                "Baidu app_id & secret are not configured. Please set them in the config file.",
                code="backend_config_missing",
                details={"engine": engine.value, "missing_field": missing[0]},
            )
    elif _is_placeholder(provider_config.get('api_key')):
        raise ConfigurationError(
            f"{engine.display_name} API key not configured. Please set it in the config file.",
            code="backend_config_missing",
            details={"engine": engine.value, "missing_field": "api_key"},
        )

    if engine in CHAT_ENGINES:
        models = provider_config.get('models') or []
        valid_models = [m for m in models if m and isinstance(m, str)]
        if not valid_models and not provider_config.get('model'):
            raise ConfigurationError(
                f"{engine.display_name} model not configured",
                code="backend_config_missing",
                details={"engine": engine.value, "missing_field": "models"},
            )

    if not provider_config.get('api_url'):
        raise ConfigurationError(
            f"{engine.display_name} API URL not configured",
            code="backend_config_missing",
            details={"engine": engine.value, "missing_field": "api_url"},
        )


class TranslationService(TranslationBackend):
    """Translation backend for one of the supported engines."""

    def __init__(
        self,
        engine: Union[EngineType, str, None] = None,
        config: Optional[Dict[str, Any]] = None,
        model_override: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.config = config if config is not None else load_config()
        if engine is None:
            engine = self.config.get('engine', EngineType.BAIDU.value)
        self.engine = EngineType.from_name(engine) if isinstance(engine, str) else engine
        self.provider_config = self.config.get(self.engine.value) or {}
        self.model_override = model_override
        self.transport = transport
        self.system_message = (self.config.get('translation') or {}).get('system_message', DEFAULT_SYSTEM_MESSAGE)
        # Token usage tracking (chat engines only)
        self.total_prompt_tokens = 0
        self.total_completion_tokens = 0
        logger.info(f"Initialized translation service with engine: {self.engine.value}")

    @staticmethod
    def is_placeholder(value: Any) -> bool:
        return _is_placeholder(value)

    def get_model(self) -> str:
        """
        Model for chat engines.

        Priority: model_override, first of 'models', legacy 'model' field.
        """
        if self.model_override:
            return self.model_override
        models = self.provider_config.get('models', [])
        if models and isinstance(models, list) and models[0]:
            return models[0]
        return self.provider_config.get('model', '')

    def record_token_usage(self, prompt_tokens: int, completion_tokens: int):
        self.total_prompt_tokens += prompt_tokens or 0
        self.total_completion_tokens += completion_tokens or 0

    def get_total_token_usage(self) -> Dict[str, int]:
        return {
            'prompt_tokens': self.total_prompt_tokens,
            'completion_tokens': self.total_completion_tokens,
        }

    def check_configuration(self) -> None:
        validate_backend_config(self.engine, self.config)

    def translate(self, text: str, source_language: str, target_language: str) -> Optional[List[str]]:
        """
        Translate newline separated text with one request.

        Blank lines are not sent; they are put back at their positions so the
        result stays line-aligned with the input.

        Raises:
            BackendFailure: If the request fails
            ConfigurationError: If the engine is not configured
        """
        lines = text.split("\n")
        positions = [i for i, line in enumerate(lines) if line.strip()]
        if not positions:
            return list(lines)

        request_lines = [lines[i] for i in positions]
        translated = self._call_engine(request_lines, source_language, target_language)

        if len(translated) != len(request_lines):
            raise BackendFailure(
                f"{self.engine.display_name} returned {len(translated)} lines for {len(request_lines)}",
                code="line_count_mismatch",
            )

        result = list(lines)
        for position, value in zip(positions, translated):
            result[position] = value
        return result

    def _call_engine(self, lines: List[str], source_language: str, target_language: str) -> List[str]:
        from res_translator.backends.providers import (
            call_baidu_api,
            call_google_api,
            call_chat_completion_api,
        )

        if self.engine == EngineType.BAIDU:
            return call_baidu_api(self, lines, source_language, target_language)
        elif self.engine == EngineType.GOOGLE:
            return call_google_api(self, lines, source_language, target_language)
        elif self.engine in CHAT_ENGINES:
            return call_chat_completion_api(self, lines, source_language, target_language)
        raise ConfigurationError(f"Unsupported translation engine: {self.engine}")


def create_backend(
    engine: Union[EngineType, str, None] = None,
    config: Optional[Dict[str, Any]] = None,
    model_override: Optional[str] = None,
) -> TranslationService:
    """Build the backend for the configured (or given) engine."""
    return TranslationService(engine=engine, config=config, model_override=model_override)
