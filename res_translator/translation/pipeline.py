"""
Translation Batch Pipeline

Coordinates the translation of one strings.xml file into several languages.
Each language is processed completely before the next one:

    filtering -> splitting -> translating batches -> merging -> writing

A batch that fails is retried a bounded number of times with a backoff delay.
When the retries are exhausted the language is abandoned and the run moves on
to the next language; all failure messages are reported together at the end.
"""

import time
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

from res_translator import language_codes as lc
from res_translator.backends.base import TranslationBackend
from res_translator.backends.exceptions import BackendFailure, ConfigurationError
from res_translator.config import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_MAX_RETRIES,
    DEFAULT_SOURCE_LANGUAGE,
    get_filter_rules,
    get_translation_config,
)
from res_translator.logger import get_logger
from res_translator.resources import entry as res
from res_translator.resources.document import ParseError, read_entries, write_entries
from res_translator.resources.entry import ResourceEntry
from res_translator.resources.filters import DEFAULT_FILTER_RULES, FilterRule
from res_translator.resources.paths import get_value_resource_path
from res_translator.translation.batching import (
    Batch,
    build_translated_entries,
    decoded_copies,
    encode_existing_entries,
    expected_line_count,
    filter_entries,
    merge_entries,
    split_batches,
)
from res_translator.translation.progress import TranslationProgress
from res_translator.translation.retry import FixedBackoff, create_backoff

logger = get_logger(__name__)

ProgressCallback = Callable[[TranslationProgress], Any]


class LanguageFailure(Exception):
    """A target language could not be completely translated."""

    def __init__(self, language: str, message: str):
        super().__init__(message)
        self.language = language


class TranslationCancelled(Exception):
    """The host asked the run to stop."""


class TranslationBatchPipeline:
    """
    Translates resource entries into target languages through a backend.

    Args:
        backend: TranslationBackend used for every request
        filter_rules: Keys matching any rule are not translated
        batch_size: Maximum scalar entries per request
        max_retries: Retries of one batch before its language fails
        backoff: Policy with wait(attempt); defaults to a fixed 1 second delay
        source_language: Language code of the source file
    """

    def __init__(
        self,
        backend: TranslationBackend,
        filter_rules: Optional[Sequence[FilterRule]] = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
        max_retries: int = DEFAULT_MAX_RETRIES,
        backoff=None,
        source_language: str = DEFAULT_SOURCE_LANGUAGE,
    ):
        if batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        if max_retries < 0:
            raise ValueError(f"max_retries must not be negative, got {max_retries}")
        self.backend = backend
        self.filter_rules = list(filter_rules) if filter_rules is not None else list(DEFAULT_FILTER_RULES)
        self.batch_size = batch_size
        self.max_retries = max_retries
        self.backoff = backoff if backoff is not None else FixedBackoff(1.0)
        self.source_language = source_language
        self.start_time: Optional[float] = None

    @classmethod
    def from_config(cls, backend: TranslationBackend, config: Dict[str, Any]) -> "TranslationBatchPipeline":
        """Build a pipeline from the translation section of a loaded config."""
        translation_config = get_translation_config(config)
        return cls(
            backend,
            filter_rules=get_filter_rules(config),
            batch_size=int(translation_config["batch_size"]),
            max_retries=int(translation_config["max_retries"]),
            backoff=create_backoff(translation_config),
            source_language=translation_config["source_language"],
        )

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    def run(
        self,
        source_entries: Sequence[ResourceEntry],
        source_path: Path,
        target_languages: Sequence[str],
        override: bool = False,
        progress_callback: Optional[ProgressCallback] = None,
        cancel_check: Optional[Callable[[], bool]] = None,
    ) -> Dict[str, Any]:
        """
        Translate source_entries into every target language and write the files.

        Args:
            source_entries: Entries of the source strings.xml
            source_path: Path of the source file, used to derive target paths
            target_languages: Language codes, processed in order
            override: Ignore the content of existing target files
            progress_callback: Receives TranslationProgress; a truthy return cancels
            cancel_check: Returns True when the run should stop

        Returns:
            Dict with success, error, generated_files, cancelled and elapsed_time

        Raises:
            ValueError: If source_path is not inside a res directory
        """
        self.start_time = time.time()
        errors: List[str] = []
        generated_files: Dict[str, str] = {}

        target_paths = {language: get_value_resource_path(source_path, language) for language in target_languages}

        try:
            self.backend.check_configuration()
        except ConfigurationError as e:
            logger.error(f"Translation backend not configured: {e}")
            return self._build_result([str(e)], generated_files)

        logger.info(
            f"Starting translation of {len(source_entries)} entries into {len(target_languages)} languages"
            f" (override={override})"
        )

        try:
            for lang_idx, language in enumerate(target_languages):
                self._check_cancel(cancel_check)
                target_path = target_paths[language]
                try:
                    translated = self.translate_language(
                        source_entries,
                        language,
                        lang_idx=lang_idx,
                        total_languages=len(target_languages),
                        progress_callback=progress_callback,
                        cancel_check=cancel_check,
                    )
                except LanguageFailure as e:
                    logger.error(str(e).strip())
                    errors.append(str(e))
                    self._report(progress_callback, self._progress(language, lang_idx, len(target_languages), phase="failed"))
                    continue

                self._report(progress_callback, self._progress(language, lang_idx, len(target_languages), phase="saving"))
                content = self.build_target_entries(source_entries, translated, target_path, override)
                try:
                    self.write_target(target_path, content)
                except OSError as e:
                    message = f"Failed to write {target_path}: {e}\n"
                    logger.error(message.strip())
                    errors.append(message)
                    continue

                generated_files[language] = str(target_path)
                self._report(progress_callback, self._progress(language, lang_idx + 1, len(target_languages), phase="completed"))
        except TranslationCancelled:
            logger.info("Translation cancelled by user request")
            return self._build_result(errors, generated_files, cancelled=True)

        return self._build_result(errors, generated_files)

    def _build_result(
        self,
        errors: List[str],
        generated_files: Dict[str, str],
        cancelled: bool = False,
    ) -> Dict[str, Any]:
        """Build the result dictionary."""
        elapsed_time = time.time() - self.start_time if self.start_time else 0
        error = "".join(errors) if errors else None

        result = {
            "success": error is None and not cancelled,
            "error": error,
            "generated_files": generated_files,
            "cancelled": cancelled,
            "elapsed_time": elapsed_time,
        }

        logger.info(
            "Translation %s in %.1f seconds (%d files written%s)",
            "cancelled" if cancelled else "completed",
            elapsed_time,
            len(generated_files),
            ", with errors" if error else "",
        )
        return result

    # ------------------------------------------------------------------
    # Per language
    # ------------------------------------------------------------------

    def translate_language(
        self,
        source_entries: Sequence[ResourceEntry],
        language: str,
        lang_idx: int = 0,
        total_languages: int = 1,
        progress_callback: Optional[ProgressCallback] = None,
        cancel_check: Optional[Callable[[], bool]] = None,
    ) -> List[ResourceEntry]:
        """
        Filter, split and translate entries for one language.

        Returns:
            Encoded translated entries, in batch order

        Raises:
            LanguageFailure: If a batch still fails after max_retries retries
            TranslationCancelled: If cancellation was requested
        """
        lang_name = lc.get_language_name(language) or language
        request_entries = decoded_copies(filter_entries(source_entries, self.filter_rules))
        batches = split_batches(request_entries, self.batch_size)
        logger.info(f"Translating to {lang_name} ({language}): {len(request_entries)} entries in {len(batches)} batches")

        translation_result: List[ResourceEntry] = []
        for batch_idx, batch in enumerate(batches):
            self._check_cancel(cancel_check)
            self._report(progress_callback, self._progress(
                language, lang_idx, total_languages,
                current_batch=batch_idx + 1, total_batches=len(batches), batch_entries_count=len(batch),
            ))
            translation_result.extend(self.translate_batch(
                batch, language, batch_idx,
                progress_callback=progress_callback,
                cancel_check=cancel_check,
                progress=self._progress(language, lang_idx, total_languages,
                                        current_batch=batch_idx + 1, total_batches=len(batches),
                                        batch_entries_count=len(batch), phase="retrying"),
            ))

        return translation_result

    def translate_batch(
        self,
        batch: Batch,
        language: str,
        batch_idx: int = 0,
        progress_callback: Optional[ProgressCallback] = None,
        cancel_check: Optional[Callable[[], bool]] = None,
        progress: Optional[TranslationProgress] = None,
    ) -> List[ResourceEntry]:
        """
        Translate one batch, retrying failed attempts.

        Raises:
            LanguageFailure: After max_retries failed retries
            TranslationCancelled: If cancellation was requested before a retry
        """
        failures = 0
        while True:
            translated = self._request(batch, language)
            if translated is not None:
                return translated

            failures += 1
            if failures > self.max_retries:
                logger.info(f"Batch {batch_idx + 1} for {language} failed {failures} times, giving up")
                raise LanguageFailure(language, f"Translation failed: too many retries for {language}\n")

            logger.warning(f"Batch {batch_idx + 1} for {language} failed, retry {failures}/{self.max_retries}")
            if progress is not None:
                progress.retry_attempt = failures
                self._report(progress_callback, progress)
            self._check_cancel(cancel_check)
            # Engines limit the request rate
            self.backoff.wait(failures)

    def _request(self, batch: Batch, language: str) -> Optional[List[ResourceEntry]]:
        """One request for a batch. Returns None when the attempt failed."""
        if expected_line_count(batch) == 0:
            # An empty <string-array> has nothing to translate
            return build_translated_entries(batch, [])

        text = res.join_values(batch)
        try:
            lines = self.backend.translate(text, self.source_language, language)
        except BackendFailure as e:
            logger.warning(f"Translation request to {language} failed: {e}")
            return None

        if lines is None:
            return None
        return build_translated_entries(batch, list(lines))

    # ------------------------------------------------------------------
    # Merging and writing
    # ------------------------------------------------------------------

    def load_existing_entries(self, target_path: Path) -> List[ResourceEntry]:
        """
        Read the current target file, encoded for writing back.

        A missing, unreadable or malformed file counts as empty.
        """
        target_path = Path(target_path)
        if not target_path.exists():
            return []
        try:
            existing = read_entries(target_path)
        except (ParseError, OSError) as e:
            logger.error(f"Could not read existing translations from {target_path}: {e}")
            return []
        encode_existing_entries(existing)
        return existing

    def build_target_entries(
        self,
        source_entries: Sequence[ResourceEntry],
        translated_entries: Sequence[ResourceEntry],
        target_path: Path,
        override: bool,
    ) -> List[ResourceEntry]:
        """Merge source, existing target content and fresh translations."""
        existing = [] if override else self.load_existing_entries(target_path)
        return merge_entries(source_entries, translated_entries, existing, override)

    def write_target(self, target_path: Path, entries: Sequence[ResourceEntry]) -> Path:
        """Write merged entries; entries that are still absent are left out."""
        present = [entry for entry in entries if not res.is_absent(entry)]
        path = write_entries(target_path, present)
        logger.info(f"Wrote {len(present)} entries to {path}")
        return path

    # ------------------------------------------------------------------
    # Progress and cancellation
    # ------------------------------------------------------------------

    @staticmethod
    def _progress(language: str, completed_languages: int, total_languages: int, **kwargs) -> TranslationProgress:
        return TranslationProgress(
            current_language=language,
            current_language_name=lc.get_language_name(language) or language,
            total_languages=total_languages,
            completed_languages=completed_languages,
            **kwargs,
        )

    @staticmethod
    def _report(progress_callback: Optional[ProgressCallback], progress: TranslationProgress) -> None:
        if progress_callback and progress_callback(progress):
            raise TranslationCancelled()

    @staticmethod
    def _check_cancel(cancel_check: Optional[Callable[[], bool]]) -> None:
        if cancel_check and cancel_check():
            raise TranslationCancelled()
