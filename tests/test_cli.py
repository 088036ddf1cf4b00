from res_translator import cli
from res_translator.resources.document import read_entries


class TestInitConfig:
    def test_creates_once(self, app_home, capsys) -> None:
        assert cli.main(["init-config"]) == 0
        assert (app_home / "config" / "config.json").exists()
        assert cli.main(["init-config"]) == 1
        assert cli.main(["init-config", "--force"]) == 0


class TestShow:
    def test_prints_decoded_entries(self, source_file, capsys) -> None:
        assert cli.main(["show", str(source_file)]) == 0
        out = capsys.readouterr().out
        assert "hello = 'Hello  '" in out
        assert "quote = \"Don't & stop\"" in out
        assert "(not translatable)" in out
        assert "planets[]" in out

    def test_missing_file(self, tmp_path, capsys) -> None:
        assert cli.main(["show", str(tmp_path / "nope.xml")]) == 1


class TestTranslate:
    def test_unknown_language(self, source_file, capsys) -> None:
        assert cli.main(["translate", str(source_file), "-l", "fr", "klingon"]) == 1
        assert "klingon" in capsys.readouterr().err

    def test_missing_source(self, tmp_path, capsys) -> None:
        assert cli.main(["translate", str(tmp_path / "strings.xml"), "-l", "fr"]) == 1

    def test_unconfigured_engine_reports_error(self, source_file, capsys) -> None:
        assert cli.main(["translate", str(source_file), "-l", "fr", "-q"]) == 1
        assert "Baidu app_id & secret are not configured" in capsys.readouterr().err

    def test_translates_with_backend(self, source_file, fake_backend, monkeypatch, capsys) -> None:
        monkeypatch.setattr(cli, "create_backend", lambda **kwargs: fake_backend)
        assert cli.main(["translate", str(source_file), "-l", "fr", "--source", "en"]) == 0

        fr_file = source_file.parent.parent / "values-fr" / "strings.xml"
        assert read_entries(fr_file)[0].value.startswith("[fr]Hello")
        out = capsys.readouterr().out
        assert "Translated 1/1 languages" in out
