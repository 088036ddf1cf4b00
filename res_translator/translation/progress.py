"""
Translation Progress Data Class

Contains the TranslationProgress dataclass reported to the host while a run
is in progress.
"""

from dataclasses import dataclass


@dataclass
class TranslationProgress:
    """Progress information for an ongoing translation run."""
    current_language: str
    current_language_name: str
    total_languages: int
    completed_languages: int
    current_batch: int = 0           # Current batch number (1-indexed)
    total_batches: int = 0           # Total batches for current language
    batch_entries_count: int = 0     # Number of entries in current batch
    phase: str = "translating"       # "translating", "retrying", "saving", "completed", "failed"
    retry_attempt: int = 0           # Retry number for the current batch

    @property
    def fraction(self) -> float:
        """Overall completion in [0, 1]: whole languages plus batches of the current one."""
        if self.total_languages <= 0:
            return 0.0
        frame = 1.0 / self.total_languages
        done = frame * self.completed_languages
        if self.total_batches > 0:
            done += frame * (max(self.current_batch - 1, 0) / self.total_batches)
        return min(done, 1.0)
