"""
Translation module - Core translation functionality

This module provides:
- TranslationBatchPipeline: filter, split, translate, merge and write per language
- TranslationProgress: Progress tracking dataclass
- Backoff policies used between retries
- Pure batching helpers (filtering, splitting, merging)
"""

from res_translator.translation.progress import TranslationProgress
from res_translator.translation.retry import ExponentialBackoff, FixedBackoff, create_backoff
from res_translator.translation.batching import (
    filter_entries,
    split_batches,
    build_translated_entries,
    merge_entries,
)
from res_translator.translation.pipeline import (
    LanguageFailure,
    TranslationBatchPipeline,
    TranslationCancelled,
)
