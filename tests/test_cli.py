"""Tests for the perch CLI."""

from pathlib import Path
from unittest.mock import patch

import pytest

from perch.cli import main
from perch.cli._options import parse_map


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("HOST", "PORT", "SSL"):
        monkeypatch.delenv(name, raising=False)


class TestMain:
    def test_no_command_prints_help(self, capsys) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 0
        assert "serve" in capsys.readouterr().out

    def test_unknown_command(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["deploy"])
        assert exc_info.value.code == 2


class TestParseMap:
    def test_pairs(self) -> None:
        assert parse_map(["js=dist/js", "/img/=assets"]) == {"js": "dist/js", "/img/": "assets"}

    @pytest.mark.parametrize("entry", ["js", "=dist", "js=", "/=dist"])
    def test_invalid(self, entry) -> None:
        with pytest.raises(ValueError, match="PREFIX=DIR"):
            parse_map([entry])


class TestRoutes:
    def test_prints_table(self, site, capsys) -> None:
        main(["routes", str(site)])
        out = capsys.readouterr().out
        lines = out.splitlines()
        assert lines[0].split() == ["PREFIX", "KIND", "TARGET"]
        assert lines[2].split()[:2] == ["/vendor", "dir"]
        assert lines[3].split()[:2] == ["/app", "dir"]
        assert "node_modules" not in out

    def test_map_and_exclude(self, site, capsys) -> None:
        main(["routes", str(site), "--map", "config.js=app/main.js", "--exclude", "vendor"])
        out = capsys.readouterr().out
        assert "/config.js" in out
        assert "file" in out
        assert "/vendor" not in out

    def test_empty_table(self, tmp_path, capsys) -> None:
        main(["routes", str(tmp_path)])
        assert capsys.readouterr().out.strip() == "No routes mapped."

    def test_bad_map_exits_2(self, site, capsys) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["routes", str(site), "--map", "nonsense"])
        assert exc_info.value.code == 2
        assert "PREFIX=DIR" in capsys.readouterr().err

    def test_missing_base_dir_exits_1(self, tmp_path) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["routes", str(tmp_path / "missing")])
        assert exc_info.value.code == 1


class TestServe:
    def test_starts_server_with_flags(self, site) -> None:
        with patch("perch.server.dev.run_dev_server") as mock_run:
            main(["serve", str(site), "--port", "9001", "--no-push-state", "--live-reload"])
        args, kwargs = mock_run.call_args
        server = args[0]
        assert args[1:] == ("127.0.0.1", 9001)
        assert server.config.push_state is False
        assert server.config.live_reload is True
        assert server.config.base_dir == Path(site).resolve()
        assert kwargs["tls"] is None

    def test_environment_fills_defaults(self, site, monkeypatch) -> None:
        monkeypatch.setenv("HOST", "0.0.0.0")
        monkeypatch.setenv("PORT", "4000")
        with patch("perch.server.dev.run_dev_server") as mock_run:
            main(["serve", str(site)])
        assert mock_run.call_args.args[1:] == ("0.0.0.0", 4000)

    def test_flags_beat_environment(self, site, monkeypatch) -> None:
        monkeypatch.setenv("PORT", "4000")
        with patch("perch.server.dev.run_dev_server") as mock_run:
            main(["serve", str(site), "--port", "5000"])
        assert mock_run.call_args.args[2] == 5000

    def test_map_option(self, site) -> None:
        (site / "dist").mkdir()
        with patch("perch.server.dev.run_dev_server") as mock_run:
            main(["serve", str(site), "--map", "js=dist"])
        server = mock_run.call_args.args[0]
        assert server.routes["js"] == Path(site).resolve() / "dist"

    def test_missing_tls_exits_1(self, site, capsys) -> None:
        with patch("perch.server.dev.run_dev_server") as mock_run:
            with pytest.raises(SystemExit) as exc_info:
                main(["serve", str(site), "--ssl"])
        assert exc_info.value.code == 1
        assert "TLS" in capsys.readouterr().err
        mock_run.assert_not_called()

    def test_certfile_requires_keyfile(self, site) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["serve", str(site), "--certfile", "server.crt"])
        assert exc_info.value.code == 2

    def test_missing_base_dir_exits_1(self, tmp_path, capsys) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["serve", str(tmp_path / "missing")])
        assert exc_info.value.code == 1
        assert "does not exist" in capsys.readouterr().err
