"""
Backends Module

This module provides the translation engines behind the pipeline's
TranslationBackend contract.
"""

from res_translator.backends.base import EngineType, TranslationBackend
from res_translator.backends.exceptions import BackendFailure, ConfigurationError, TranslationError
from res_translator.backends.service import TranslationService, create_backend, validate_backend_config

__all__ = [
    'EngineType',
    'TranslationBackend',
    'TranslationError',
    'ConfigurationError',
    'BackendFailure',
    'TranslationService',
    'create_backend',
    'validate_backend_config',
]
