"""Tests for the csvsplit command-line interface.

Tests the command-line interface including:
- required --line-bytes
- file naming flags
- stdin and file input
- exit codes and diagnostics on stderr
- --config, --manifest and --verify-manifest
"""

import io
import json
import subprocess
import sys
from pathlib import Path

import pytest

from csvsplit.__main__ import build_parser, main


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch) -> Path:
    monkeypatch.chdir(tmp_path)
    return tmp_path


def _stdin(monkeypatch, data: bytes) -> None:
    monkeypatch.setattr(sys, "stdin", io.TextIOWrapper(io.BytesIO(data)))


class TestCLIHelp:
    def test_help_flag(self):
        """--help should show usage information."""
        result = subprocess.run(
            [sys.executable, "-m", "csvsplit", "--help"],
            capture_output=True,
            text=True,
        )
        assert result.returncode == 0
        assert "--line-bytes" in result.stdout

    def test_parser_defaults_are_unset(self):
        """Unset flags parse to None so config files are not overridden."""
        args = build_parser().parse_args([])
        assert args.line_bytes is None
        assert args.verbose is None
        assert args.suffix_length is None


class TestCLISplit:
    def test_split_stdin(self, workdir: Path, monkeypatch):
        """Default names are two-digit numbers in the current directory."""
        _stdin(monkeypatch, b'a,b,"c\nasdfasdf"\nd,e,f')

        assert main(["--line-bytes", "6"]) == 0

        assert (workdir / "00").read_bytes() == b'a,b,"c\nasdfasdf"\n'
        assert (workdir / "01").read_bytes() == b"d,e,f\n"
        assert not (workdir / "02").exists()

    def test_split_file_with_naming(self, workdir: Path):
        source = workdir / "orders.csv"
        source.write_bytes(b"id,name\n1,alpha\n2,beta\n")

        code = main([
            str(source),
            "--line-bytes", "10",
            "--prefix", "out/orders_",
            "--suffix-length", "3",
            "--numeric-suffixes", "1",
            "--additional-suffix", ".csv",
        ])

        assert code == 0
        names = sorted(p.name for p in (workdir / "out").iterdir())
        assert names == ["orders_001.csv", "orders_002.csv", "orders_003.csv"]
        assert (workdir / "out" / "orders_001.csv").read_bytes() == b"id,name\n"

    def test_empty_input_creates_no_files(self, workdir: Path, monkeypatch):
        _stdin(monkeypatch, b"")
        assert main(["--line-bytes", "6"]) == 0
        assert list(workdir.iterdir()) == []

    def test_verbose_logs_opened_files(self, workdir: Path, monkeypatch, capsys):
        _stdin(monkeypatch, b"a\nb\n")
        assert main(["--line-bytes", "2", "--verbose"]) == 0
        err = capsys.readouterr().err
        assert "opened new file for writing: 00" in err
        assert "opened new file for writing: 01" in err


class TestCLIErrors:
    @pytest.mark.parametrize("argv", [[], ["--line-bytes", "0"], ["--line-bytes", "-3"]])
    def test_line_bytes_required(self, workdir: Path, monkeypatch, capsys, argv):
        _stdin(monkeypatch, b"a\n")
        assert main(argv) == 1
        assert "must set --line-bytes to a positive integer" in capsys.readouterr().err

    def test_malformed_input(self, workdir: Path, monkeypatch, capsys):
        _stdin(monkeypatch, b'ok\n"a"x,b\n')
        assert main(["--line-bytes", "100"]) == 1
        err = capsys.readouterr().err
        assert "invalid character following" in err
        # Rows before the error were written
        assert (workdir / "00").read_bytes() == b"ok\n"

    def test_suffix_overflow(self, workdir: Path, monkeypatch, capsys):
        _stdin(monkeypatch, b"a\nb\nc\n")
        assert main(["--line-bytes", "2", "--suffix-length", "1", "--numeric-suffixes", "9"]) == 1
        assert "longer than suffix size" in capsys.readouterr().err
        assert (workdir / "9").read_bytes() == b"a\n"

    def test_missing_input_file(self, workdir: Path, capsys):
        assert main(["missing.csv", "--line-bytes", "10"]) == 1
        assert "Failed to open input missing.csv" in capsys.readouterr().err

    def test_row_too_large(self, workdir: Path, monkeypatch, capsys):
        _stdin(monkeypatch, b"x" * 100)
        assert main(["--line-bytes", "10", "--max-row-bytes", "50"]) == 1
        assert "row exceeds the maximum of 50 bytes" in capsys.readouterr().err


class TestCLIConfig:
    def test_config_file(self, workdir: Path, monkeypatch):
        monkeypatch.setenv("CSVSPLIT_OUT", "parts")
        (workdir / "split.yaml").write_text(
            'line_bytes: 4\nprefix: "${CSVSPLIT_OUT}/p"\nadditional_suffix: .csv\n'
        )
        _stdin(monkeypatch, b"a,b\nc,d\n")

        assert main(["--config", "split.yaml"]) == 0
        assert sorted(p.name for p in (workdir / "parts").iterdir()) == ["p00.csv", "p01.csv"]

    def test_cli_overrides_config(self, workdir: Path, monkeypatch):
        (workdir / "split.yaml").write_text("line_bytes: 4\n")
        _stdin(monkeypatch, b"a,b\nc,d\n")

        assert main(["--config", "split.yaml", "--line-bytes", "100"]) == 0
        assert (workdir / "00").read_bytes() == b"a,b\nc,d\n"

    def test_env_file(self, workdir: Path, monkeypatch):
        monkeypatch.delenv("CSVSPLIT_PREFIX", raising=False)
        (workdir / ".env.split").write_text("CSVSPLIT_PREFIX=fromenv_\n")
        (workdir / "split.yaml").write_text('line_bytes: 100\nprefix: "${CSVSPLIT_PREFIX}"\n')
        _stdin(monkeypatch, b"a\n")

        assert main(["--env-file", ".env.split", "--config", "split.yaml"]) == 0
        assert (workdir / "fromenv_00").exists()
        monkeypatch.delenv("CSVSPLIT_PREFIX", raising=False)

    def test_bad_config(self, workdir: Path, capsys):
        (workdir / "split.yaml").write_text("line_bytes: 10\ncolour: blue\n")
        assert main(["--config", "split.yaml"]) == 1
        assert "Unknown keys" in capsys.readouterr().err

    def test_config_not_utf8(self, workdir: Path, capsys):
        (workdir / "split.yaml").write_bytes(b"prefix: \xff\xfe\nline_bytes: 4\n")
        assert main(["--config", "split.yaml"]) == 1
        err = capsys.readouterr().err
        assert err.startswith("Error: Config file split.yaml is not valid UTF-8")


class TestCLIManifest:
    def test_manifest_and_verify(self, workdir: Path, monkeypatch, capsys):
        _stdin(monkeypatch, b"a\nb\nc\n")

        assert main(["--line-bytes", "4", "--prefix", "out/c", "--manifest", "out/manifest.json"]) == 0
        data = json.loads((workdir / "out" / "manifest.json").read_text())
        assert data["chunk_count"] == 2
        assert data["row_count"] == 3

        assert main(["--verify-manifest", "out/manifest.json"]) == 0
        assert "VALID" in capsys.readouterr().out

        (workdir / "out" / "c01").write_bytes(b"tampered\n")
        assert main(["--verify-manifest", "out/manifest.json"]) == 1
        assert "mismatched: c01" in capsys.readouterr().out

    @pytest.mark.parametrize("content", ["{not json", '{"files": [{"rows": 1}]}'])
    def test_corrupt_manifest(self, workdir: Path, capsys, content: str):
        (workdir / "manifest.json").write_text(content)

        assert main(["--verify-manifest", "manifest.json"]) == 1
        err = capsys.readouterr().err
        assert err.startswith("Error:")
        assert "manifest.json" in err
