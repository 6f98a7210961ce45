"""Tests for the remoteload command line entry point."""

import pytest

from common.errors import HTTPError, InvalidMetadataError, OnlyScopeProvidedError
from common.http_models import FetchedResponse
from constants import ExitCodes
from cli_resolve import exit_code_for
from loader.plugin import Message
from remoteload import main


def run(argv):
    with pytest.raises(SystemExit) as excinfo:
        main(argv)
    return excinfo.value.code


class TestExitCodes:
    """Mapping of hook errors to exit codes."""

    def test_success(self):
        """No errors means success."""
        assert exit_code_for([]) == ExitCodes.SUCCESS

    def test_fetch_error(self):
        """Transport failures map to CONNECTION_ERROR."""
        err = HTTPError(500, "Internal Server Error", FetchedResponse(url="https://x/", status=500))
        assert exit_code_for([Message(text=str(err), detail=err)]) == ExitCodes.CONNECTION_ERROR

    def test_resolution_error(self):
        """Everything else maps to RESOLUTION_ERROR."""
        err = OnlyScopeProvidedError("npm:@scope")
        assert exit_code_for([Message(text=str(err), detail=err)]) == ExitCodes.RESOLUTION_ERROR

    def test_invalid_metadata(self):
        """Unusable registry documents map to RESOLUTION_ERROR."""
        err = InvalidMetadataError("https://registry.npmjs.org/x", "not JSON")
        assert exit_code_for([Message(text=str(err), detail=err)]) == ExitCodes.RESOLUTION_ERROR


class TestResolveCommand:
    """remoteload resolve."""

    def test_bare_name_is_external(self, capsys):
        """Bare names print as external."""
        code = run(["resolve", "react", "--base-url", "https://app.example/"])
        assert code == ExitCodes.SUCCESS.value
        assert capsys.readouterr().out.strip() == "external:react"

    def test_relative_path(self, tmp_path, capsys):
        """Relative specifiers print as absolute URLs."""
        base = tmp_path.as_uri() + "/"
        code = run(["resolve", "./main.ts", "--base-url", base])
        assert code == ExitCodes.SUCCESS.value
        assert capsys.readouterr().out.strip() == (tmp_path / "main.ts").as_uri()

    def test_importer(self, capsys):
        """Relative specifiers resolve against --importer."""
        code = run(["resolve", "./b.js", "--importer", "https://esm.sh/pkg/a.js", "--base-url", "https://app.example/"])
        assert code == ExitCodes.SUCCESS.value
        assert capsys.readouterr().out.strip() == "https://esm.sh/pkg/b.js"

    def test_bad_specifier(self):
        """Malformed package specifiers exit with RESOLUTION_ERROR."""
        assert run(["resolve", "npm:@scope", "--base-url", "https://app.example/"]) == ExitCodes.RESOLUTION_ERROR.value


class TestLoadCommand:
    """remoteload load."""

    def test_load_file(self, tmp_path, capsys):
        """Local files are loaded and classified."""
        (tmp_path / "mod.ts").write_text("export const x = 1;\n", encoding="utf-8")
        out = tmp_path / "out.ts"
        code = run(["load", "mod.ts", "--base-url", tmp_path.as_uri() + "/", "-o", str(out)])
        assert code == ExitCodes.SUCCESS.value
        assert capsys.readouterr().out.strip() == "ts\t20 bytes\tnetwork"
        assert out.read_text(encoding="utf-8") == "export const x = 1;\n"

    def test_load_missing_file(self, tmp_path):
        """Missing files exit with CONNECTION_ERROR."""
        code = run(["load", "nope.ts", "--base-url", tmp_path.as_uri() + "/"])
        assert code == ExitCodes.CONNECTION_ERROR.value

    def test_missing_config(self, tmp_path):
        """A missing config file exits with FILE_ERROR."""
        code = run(["load", "a.ts", "--config", str(tmp_path / "missing.yml")])
        assert code == ExitCodes.FILE_ERROR.value
