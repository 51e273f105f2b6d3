from unittest.mock import patch

import pytest

from spec_tools import __main__
from spec_tools.shared.errors import SpecParseError


class TestCmdFunctions:
    @patch("spec_tools.compose.main.main")
    def test_cmd_merge(self, mock_main):
        mock_main.return_value = 0
        assert __main__.cmd_merge(["-s", "api.yaml"]) == 0
        mock_main.assert_called_once_with(["-s", "api.yaml"])

    @patch("spec_tools.compose.main.main")
    def test_cmd_merge_failure(self, mock_main):
        mock_main.return_value = 1
        assert __main__.cmd_merge([]) == 1

    @patch("spec_tools.partition.main.main")
    def test_cmd_split(self, mock_main):
        mock_main.return_value = 0
        assert __main__.cmd_split(["-s", "api.yaml", "--strategy", "ByTag"]) == 0
        mock_main.assert_called_once_with(["-s", "api.yaml", "--strategy", "ByTag"])

    @patch("spec_tools.partition.analysis.main")
    def test_cmd_analyze(self, mock_main):
        mock_main.return_value = 0
        assert __main__.cmd_analyze(["-s", "api.yaml", "--json"]) == 0
        mock_main.assert_called_once()


class TestCmdNames:
    def test_pascal_case(self, capsys):
        assert __main__.cmd_names(["my-pet-store"]) == 0
        out = capsys.readouterr().out
        assert "my-pet-store" in out
        assert out.split()[-1] == "MyPetStore"

    def test_header(self, capsys):
        assert __main__.cmd_names(["x-correlation-id", "--header"]) == 0
        assert capsys.readouterr().out.split()[-1] == "CorrelationId"

    def test_camel_case_plural(self, capsys):
        assert __main__.cmd_names(["order-category", "--convention", "camelCase", "--plural"]) == 0
        assert capsys.readouterr().out.split()[-1] == "orderCategories"

    def test_reserved_name_is_qualified(self, capsys):
        assert __main__.cmd_names(["result"]) == 0
        out = capsys.readouterr().out
        assert "crate::models::Result" in out
        assert "ReservedIdentifierConflict" in out

    def test_typescript_backend(self, capsys):
        assert __main__.cmd_names(["record", "--backend", "typescript"]) == 0
        assert "Types.Record" in capsys.readouterr().out

    def test_collision_fails(self, capsys):
        assert __main__.cmd_names(["pet-store", "pet_store"]) == 1
        assert "IdentifierCollision" in capsys.readouterr().out


class TestMain:
    def test_help(self, capsys):
        assert __main__.main([]) == 0
        out = capsys.readouterr().out
        assert "Available commands:" in out
        for name in __main__.COMMANDS:
            assert name in out

    def test_help_flag(self, capsys):
        assert __main__.main(["--help"]) == 0
        assert "Usage:" in capsys.readouterr().out

    def test_unknown_command(self, capsys):
        assert __main__.main(["publish"]) == 1
        assert "Unknown command: publish" in capsys.readouterr().out

    @patch("spec_tools.compose.main.main")
    def test_dispatch(self, mock_main):
        mock_main.return_value = 0
        assert __main__.main(["merge", "-s", "api.yaml"]) == 0
        mock_main.assert_called_once_with(["-s", "api.yaml"])

    @patch("spec_tools.compose.main.main")
    def test_spec_error_is_reported(self, mock_main, capsys):
        mock_main.side_effect = SpecParseError("Invalid YAML", "api.yaml")
        assert __main__.main(["merge", "-s", "api.yaml"]) == 1
        assert "Error: [api.yaml] Invalid YAML" in capsys.readouterr().out

    @patch("spec_tools.__main__.logging.basicConfig")
    @patch("spec_tools.partition.analysis.main")
    def test_verbose(self, mock_main, mock_basic_config):
        mock_main.return_value = 0
        assert __main__.main(["-v", "analyze", "-s", "api.yaml"]) == 0
        mock_basic_config.assert_called_once()
        mock_main.assert_called_once_with(["-s", "api.yaml"])

    def test_argparse_exit_propagates(self):
        with pytest.raises(SystemExit):
            __main__.main(["names"])
