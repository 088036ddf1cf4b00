import hashlib
import json
from urllib.parse import parse_qs

import httpx
import pytest

from res_translator.backends import (
    BackendFailure,
    ConfigurationError,
    EngineType,
    TranslationService,
    validate_backend_config,
)
from res_translator.backends.providers import to_baidu_language
from res_translator.backends.utils import parse_translations_response
from res_translator.config import load_config


@pytest.fixture
def config():
    config = load_config()
    config["baidu"].update({"app_id": "2015063000000001", "secret": "12345678"})
    config["google"]["api_key"] = "google-key"
    config["openai"]["api_key"] = "sk-test"
    return config


def make_service(engine, config, handler):
    return TranslationService(engine=engine, config=config, transport=httpx.MockTransport(handler))


class TestEngineType:
    def test_from_name(self) -> None:
        assert EngineType.from_name(" Baidu ") is EngineType.BAIDU
        assert EngineType.GEMINI.display_name == "Gemini"

    def test_unknown_engine(self) -> None:
        with pytest.raises(ValueError, match="supported: baidu"):
            EngineType.from_name("bing")


class TestValidateBackendConfig:
    def test_default_config_is_not_configured(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            validate_backend_config("baidu", load_config())
        assert exc_info.value.code == "backend_config_missing"
        assert exc_info.value.details == {"engine": "baidu", "missing_field": "app_id"}

    def test_placeholder_api_key(self) -> None:
        with pytest.raises(ConfigurationError, match="DeepSeek API key"):
            validate_backend_config(EngineType.DEEPSEEK, load_config())

    def test_missing_models(self, config) -> None:
        config["openai"]["models"] = []
        with pytest.raises(ConfigurationError) as exc_info:
            validate_backend_config("openai", config)
        assert exc_info.value.details["missing_field"] == "models"

    def test_configured(self, config) -> None:
        validate_backend_config("baidu", config)
        validate_backend_config("google", config)
        validate_backend_config("openai", config)


class TestBaidu:
    def test_signed_request_and_blank_lines(self, config) -> None:
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            form = {k: v[0] for k, v in parse_qs(request.content.decode("utf-8")).items()}
            expected_sign = hashlib.md5(
                (form["appid"] + form["q"] + form["salt"] + "12345678").encode("utf-8")
            ).hexdigest()
            assert form["sign"] == expected_sign
            assert form["from"] == "en"
            assert form["to"] == "fra"
            assert form["q"] == "Hello\nWorld"
            return httpx.Response(200, json={
                "from": "en",
                "to": "fra",
                "trans_result": [{"src": "Hello", "dst": "Bonjour"}, {"src": "World", "dst": "Monde"}],
            })

        service = make_service("baidu", config, handler)
        assert service.translate("Hello\n\nWorld", "en", "fr") == ["Bonjour", "", "Monde"]
        assert len(requests) == 1
        assert str(requests[0].url) == config["baidu"]["api_url"]

    def test_only_blank_lines_needs_no_request(self, config) -> None:
        def handler(request):
            raise AssertionError("no request expected")

        service = make_service("baidu", config, handler)
        assert service.translate("\n", "en", "fr") == ["", ""]

    def test_error_code(self, config) -> None:
        def handler(request):
            return httpx.Response(200, json={"error_code": "54003", "error_msg": "Invalid Access Limit"})

        service = make_service("baidu", config, handler)
        with pytest.raises(BackendFailure, match="54003"):
            service.translate("Hello", "en", "fr")

    def test_line_count_mismatch(self, config) -> None:
        def handler(request):
            return httpx.Response(200, json={"trans_result": [{"src": "a", "dst": "b"}]})

        service = make_service("baidu", config, handler)
        with pytest.raises(BackendFailure) as exc_info:
            service.translate("one\ntwo", "en", "fr")
        assert exc_info.value.code == "line_count_mismatch"

    def test_language_mapping(self) -> None:
        assert to_baidu_language("zh-CN") == "zh"
        assert to_baidu_language("zh-TW") == "cht"
        assert to_baidu_language("de") == "de"
        assert to_baidu_language("pt-BR") == "pt"
        assert to_baidu_language("auto") == "auto"


class TestHttpErrors:
    def test_status_error(self, config) -> None:
        def handler(request):
            return httpx.Response(500, json={"error": {"message": "internal"}})

        service = make_service("google", config, handler)
        with pytest.raises(BackendFailure) as exc_info:
            service.translate("Hello", "en", "fr")
        assert exc_info.value.code == "http_error"
        assert exc_info.value.details == {"status_code": 500}
        assert "internal" in str(exc_info.value)

    def test_timeout(self, config) -> None:
        def handler(request):
            raise httpx.ConnectTimeout("timed out", request=request)

        service = make_service("google", config, handler)
        with pytest.raises(BackendFailure) as exc_info:
            service.translate("Hello", "en", "fr")
        assert exc_info.value.code == "timeout"

    def test_invalid_json(self, config) -> None:
        def handler(request):
            return httpx.Response(200, text="<html>busy</html>")

        service = make_service("google", config, handler)
        with pytest.raises(BackendFailure) as exc_info:
            service.translate("Hello", "en", "fr")
        assert exc_info.value.code == "invalid_response"


class TestGoogle:
    def test_request_and_unescape(self, config) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.params["key"] == "google-key"
            body = json.loads(request.content)
            assert body == {"q": ["Tom & Jerry", "Bye"], "target": "fr", "format": "text", "source": "en"}
            return httpx.Response(200, json={"data": {"translations": [
                {"translatedText": "Tom &amp; Jerry"},
                {"translatedText": "Au revoir"},
            ]}})

        service = make_service("google", config, handler)
        assert service.translate("Tom & Jerry\nBye", "en", "fr") == ["Tom & Jerry", "Au revoir"]


class TestChatCompletion:
    def test_parses_fenced_array_and_counts_tokens(self, config) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.headers["Authorization"] == "Bearer sk-test"
            body = json.loads(request.content)
            assert body["model"] == "gpt-4o-mini"
            assert '["Hello", "World"]' in body["messages"][1]["content"]
            return httpx.Response(200, json={
                "choices": [{"message": {"content": '```json\n["Bonjour", "Monde"]\n```'}}],
                "usage": {"prompt_tokens": 120, "completion_tokens": 8},
            })

        service = make_service("openai", config, handler)
        assert service.translate("Hello\nWorld", "en", "fr") == ["Bonjour", "Monde"]
        assert service.get_total_token_usage() == {"prompt_tokens": 120, "completion_tokens": 8}

    def test_model_override(self, config) -> None:
        def handler(request):
            assert json.loads(request.content)["model"] == "gpt-4o"
            return httpx.Response(200, json={"choices": [{"message": {"content": '["Salut"]'}}]})

        service = TranslationService("openai", config, model_override="gpt-4o", transport=httpx.MockTransport(handler))
        assert service.translate("Hi", "en", "fr") == ["Salut"]

    def test_unparseable_answer(self, config) -> None:
        def handler(request):
            return httpx.Response(200, json={"choices": [{"message": {"content": "Sorry, I cannot help."}}]})

        service = make_service("openai", config, handler)
        with pytest.raises(BackendFailure):
            service.translate("Hi", "en", "fr")


class TestParseTranslationsResponse:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ('["a", "b"]', ["a", "b"]),
            ('Here you go: ["a [x]", "b"] done', ["a [x]", "b"]),
            ('{"translations": ["a", null]}', ["a", ""]),
            ("no json", None),
            ("", None),
        ],
    )
    def test_variants(self, text, expected) -> None:
        assert parse_translations_response(text) == expected
