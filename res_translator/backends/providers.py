"""
Translation Engine API Implementations

This module contains the HTTP calls for each engine:
- Baidu general translation API
- Google Cloud Translation (v2)
- OpenAI-compatible chat completions (OpenAI, DeepSeek, Gemini)

Each function takes a TranslationService instance and the lines to translate,
and returns the translated lines. Every function makes exactly one request;
retrying is left to the caller.
"""

import hashlib
import html
import json
import random
from typing import Any, Dict, List

import httpx

from res_translator.logger import get_logger
from res_translator.backends.exceptions import BackendFailure, ConfigurationError
from res_translator.backends.utils import parse_translations_response
from res_translator import language_codes as lc
from res_translator.config import get_prompt

logger = get_logger(__name__)

# Baidu uses its own language identifiers
BAIDU_LANGUAGE_CODES = {
    'zh': 'zh',
    'zh-CN': 'zh',
    'zh-TW': 'cht',
    'zh-HK': 'cht',
    'ja': 'jp',
    'ko': 'kor',
    'fr': 'fra',
    'es': 'spa',
    'ar': 'ara',
    'bg': 'bul',
    'et': 'est',
    'da': 'dan',
    'fi': 'fin',
    'ro': 'rom',
    'sl': 'slo',
    'sv': 'swe',
    'vi': 'vie',
}


def to_baidu_language(code: str) -> str:
    if not code or code.lower() == 'auto':
        return 'auto'
    if code in BAIDU_LANGUAGE_CODES:
        return BAIDU_LANGUAGE_CODES[code]
    base = lc.extract_base_language(code)
    return BAIDU_LANGUAGE_CODES.get(base, base)


def get_httpx_timeout(timeout_config: Any) -> httpx.Timeout:
    """
    Convert timeout configuration to httpx.Timeout object.

    Args:
        timeout_config: Either a number (read timeout) or a dict with
            connect, write, read, pool keys
    """
    if isinstance(timeout_config, dict):
        return httpx.Timeout(
            connect=timeout_config.get('connect', 10.0),
            write=timeout_config.get('write', 30.0),
            read=timeout_config.get('read', 60.0),
            pool=timeout_config.get('pool', 10.0),
        )
    timeout_value = float(timeout_config) if timeout_config else 60.0
    return httpx.Timeout(connect=10.0, write=30.0, read=timeout_value, pool=10.0)


def handle_http_error(e: httpx.HTTPStatusError, provider: str):
    """Turn an HTTP error response into a BackendFailure with the provider's message."""
    status_code = e.response.status_code
    try:
        error_json = e.response.json()
        error_detail = error_json.get("error", error_json) if isinstance(error_json, dict) else error_json
        if isinstance(error_detail, dict):
            error_text = error_detail.get("message", str(error_detail))
        else:
            error_text = str(error_detail)
    except ValueError:
        error_text = e.response.text[:500]

    raise BackendFailure(
        f"{provider} API error ({status_code}): {error_text}",
        code="http_error",
        details={"status_code": status_code},
    )


def _post(service, provider: str, url: str, **kwargs) -> Dict[str, Any]:
    timeout = get_httpx_timeout(service.provider_config.get('timeout', 60))
    try:
        with httpx.Client(timeout=timeout, transport=service.transport) as client:
            response = client.post(url, **kwargs)
            response.raise_for_status()
            return response.json()
    except httpx.HTTPStatusError as e:
        handle_http_error(e, provider)
    except httpx.TimeoutException:
        raise BackendFailure(f"{provider} API request timeout", code="timeout")
    except httpx.HTTPError as e:
        raise BackendFailure(f"{provider} API request failed: {e}", code="network")
    except ValueError as e:
        raise BackendFailure(f"{provider} API returned invalid JSON: {e}", code="invalid_response")


def call_baidu_api(service, lines: List[str], source_language: str, target_language: str) -> List[str]:
    """Call the Baidu general translation API. Baidu splits the query on newlines."""
    provider_config = service.provider_config
    app_id = provider_config.get('app_id', '')
    secret = provider_config.get('secret', '')
    if not app_id or not secret:
        raise ConfigurationError("Baidu app_id and secret are not configured")

    query = "\n".join(lines)
    salt = str(random.randint(32768, 65536))
    sign = hashlib.md5((app_id + query + salt + secret).encode('utf-8')).hexdigest()
    data = {
        'appid': app_id,
        'q': query,
        'from': to_baidu_language(source_language),
        'to': to_baidu_language(target_language),
        'salt': salt,
        'sign': sign,
    }

    logger.debug(f"  Calling Baidu API ({data['from']} -> {data['to']}, {len(lines)} lines)...")
    result = _post(service, "Baidu", provider_config['api_url'], data=data)

    if 'error_code' in result and str(result['error_code']) != '52000':
        raise BackendFailure(
            f"Baidu API error ({result['error_code']}): {result.get('error_msg', 'unknown error')}",
            code="provider_error",
            details={"error_code": result['error_code']},
        )

    trans_result = result.get('trans_result')
    if not isinstance(trans_result, list):
        raise BackendFailure("No trans_result in Baidu response", code="invalid_response")
    return [item.get('dst', '') for item in trans_result]


def call_google_api(service, lines: List[str], source_language: str, target_language: str) -> List[str]:
    """Call Google Cloud Translation v2 with one q per line."""
    provider_config = service.provider_config
    api_key = provider_config.get('api_key', '')
    if service.is_placeholder(api_key):
        raise ConfigurationError("Google API key not configured")

    body = {'q': lines, 'target': target_language, 'format': 'text'}
    if source_language and source_language.lower() != 'auto':
        body['source'] = source_language

    logger.debug(f"  Calling Google API ({source_language} -> {target_language}, {len(lines)} lines)...")
    result = _post(service, "Google", provider_config['api_url'], params={'key': api_key}, json=body)

    try:
        translations = result['data']['translations']
    except (KeyError, TypeError):
        raise BackendFailure("Unexpected Google API response format", code="invalid_response")
    return [html.unescape(item.get('translatedText', '')) for item in translations]


def _build_chat_prompt(lines: List[str], source_language: str, target_language: str) -> str:
    prompt_template = get_prompt('line_translation_prompt')['prompt']
    return prompt_template.format(
        source_language_name=lc.get_language_name(source_language) or source_language,
        source_language_code=source_language,
        target_language_name=lc.get_language_name(target_language) or target_language,
        target_language_code=target_language,
        text_count=len(lines),
        texts_json=json.dumps(lines, ensure_ascii=False),
    )


def call_chat_completion_api(service, lines: List[str], source_language: str, target_language: str) -> List[str]:
    """Call an OpenAI-compatible chat completions endpoint and parse the JSON array answer."""
    provider = service.engine.display_name
    provider_config = service.provider_config
    api_key = provider_config.get('api_key', '')
    model = service.get_model()
    if service.is_placeholder(api_key):
        raise ConfigurationError(f"{provider} API key not configured")
    if not model:
        raise ConfigurationError(f"{provider} model not configured")

    headers = {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json"
    }
    body = {
        "model": model,
        "messages": [
            {"role": "system", "content": service.system_message},
            {"role": "user", "content": _build_chat_prompt(lines, source_language, target_language)},
        ],
    }

    logger.debug(f"  Calling {provider} API (model: {model}, {len(lines)} lines)...")
    result = _post(service, provider, provider_config['api_url'], headers=headers, json=body)

    usage = result.get('usage') or {}
    service.record_token_usage(usage.get('prompt_tokens', 0), usage.get('completion_tokens', 0))

    choices = result.get('choices') or []
    if not choices:
        raise BackendFailure(f"No content in {provider} response", code="invalid_response")
    content = (choices[0].get('message') or {}).get('content', '')
    logger.debug(f"  Received {len(content)} chars from {provider}")

    translations = parse_translations_response(content)
    if translations is None:
        raise BackendFailure(f"Could not parse translations from {provider} response", code="invalid_response")
    return translations
