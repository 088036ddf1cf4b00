from pathlib import Path
from typing import List, Optional

import pytest

from res_translator.backends.base import TranslationBackend
from res_translator.backends.exceptions import BackendFailure

SOURCE_XML = """<?xml version="1.0" encoding="utf-8"?>
<resources>
    <!-- Main screen -->
    <string name="hello">Hello  </string>
    <string name="quote">Don\\'t &amp; stop</string>
    <string name="app_name" translatable="false">App</string>
    <string-array name="planets">
        <item>Mercury</item>
        <item>Venus</item>
    </string-array>
</resources>
"""


class FakeBackend(TranslationBackend):
    """
    Backend prefixing each non-empty line with [<target>].

    fail_languages: targets that always fail (None answer)
    failures: number of requests that raise BackendFailure before answering
    short_answers: number of requests answered with one line missing
    """

    def __init__(self):
        self.calls = []
        self.fail_languages = set()
        self.failures = 0
        self.short_answers = 0

    def translate(self, text: str, source_language: str, target_language: str) -> Optional[List[str]]:
        self.calls.append((text, source_language, target_language))
        if target_language in self.fail_languages:
            return None
        if self.failures > 0:
            self.failures -= 1
            raise BackendFailure("Service unavailable")
        lines = [f"[{target_language}]{line}" if line else "" for line in text.split("\n")]
        if self.short_answers > 0:
            self.short_answers -= 1
            return lines[:-1]
        return lines

    def calls_for(self, language: str):
        return [call for call in self.calls if call[2] == language]


@pytest.fixture(autouse=True)
def app_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Keep config and logs of every test inside its own temporary directory."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("RES_TRANSLATOR_HOME", str(home))
    return home


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def source_file(tmp_path: Path) -> Path:
    """strings.xml inside an Android res/values directory."""
    path = tmp_path / "app" / "src" / "main" / "res" / "values" / "strings.xml"
    path.parent.mkdir(parents=True)
    path.write_text(SOURCE_XML, encoding="utf-8")
    return path
