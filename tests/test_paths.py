from pathlib import Path

import pytest

from res_translator import language_codes as lc
from res_translator.resources.paths import get_value_resource_path


class TestGetValueResourcePath:
    def test_plain_language(self) -> None:
        source = Path("/work/app/src/main/res/values/strings.xml")
        assert get_value_resource_path(source, "fr") == Path("/work/app/src/main/res/values-fr/strings.xml")

    def test_region_and_file_name_kept(self) -> None:
        source = "/work/app/src/main/res/values/arrays.xml"
        assert get_value_resource_path(source, "zh-CN") == Path("/work/app/src/main/res/values-zh-rCN/arrays.xml")

    def test_legacy_code(self) -> None:
        source = "/work/res/values/strings.xml"
        assert get_value_resource_path(source, "he") == Path("/work/res/values-iw/strings.xml")

    def test_outside_res_directory(self) -> None:
        with pytest.raises(ValueError):
            get_value_resource_path("/work/values/strings.xml", "fr")


class TestLanguageCodes:
    @pytest.mark.parametrize(
        "code, suffix",
        [("de", "de"), ("zh-CN", "zh-rCN"), ("pt_BR", "pt-rBR"), ("id", "in"), ("yi", "ji")],
    )
    def test_android_folder_suffix(self, code, suffix) -> None:
        assert lc.get_android_folder_suffix(code) == suffix

    def test_names(self) -> None:
        assert lc.get_language_name("fr") == "French"
        assert lc.get_language_name("xx") is None
        assert lc.is_valid_language_code("zh-CN")
        assert not lc.is_valid_language_code("invalid")

