"""
CLI Unit Tests
Tests for arbor_cli: root, prove, verify and config subcommands.
"""
import io
import json
import logging

import pytest

from arbor.crypto.hashing import sha3_256, to_hex
from arbor.merkle import build
from arbor_cli.commands import EXIT_RUNTIME_ERROR, EXIT_SUCCESS, EXIT_VERIFICATION_FAILED
from arbor_cli.main import create_parser, main, setup_logging


@pytest.fixture(autouse=True)
def _isolated_cwd(tmp_path, monkeypatch):
    """No arbor.json from the working directory leaks into CLI runs."""
    monkeypatch.chdir(tmp_path)


def _run_json(capsys, argv):
    code = main(argv)
    out = capsys.readouterr().out
    return code, json.loads(out)


class TestParser:

    def test_no_command_prints_help(self, capsys):
        assert main([]) == EXIT_RUNTIME_ERROR
        assert "usage" in capsys.readouterr().out

    def test_prove_requires_index(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["prove", "a"])


class TestRootCommand:

    def test_root_json(self, capsys):
        code, summary = _run_json(capsys, ["root", "a", "b", "c", "--json"])

        assert code == EXIT_SUCCESS
        assert summary["root"] == to_hex(build(["a", "b", "c"]).root)
        assert summary["leaf_count"] == 3
        assert summary["depth"] == 3

    def test_root_with_append(self, capsys):
        code, summary = _run_json(capsys, ["root", "a", "b", "--append", "c", "d", "--json"])

        assert code == EXIT_SUCCESS
        assert summary["root"] == to_hex(build(["a", "b", "c", "d"]).root)

    def test_root_from_file(self, capsys, tmp_path):
        (tmp_path / "elements.txt").write_text("b\nc\n", encoding="utf-8")
        code, summary = _run_json(capsys, ["root", "a", "--file", "elements.txt", "--json"])

        assert code == EXIT_SUCCESS
        assert summary["root"] == to_hex(build(["a", "b", "c"]).root)

    def test_root_hash_override(self, capsys):
        code, summary = _run_json(capsys, ["--hash", "sha3_256", "root", "a", "b", "--json"])

        assert summary["hash_algorithm"] == "sha3_256"
        assert summary["root"] == to_hex(build(["a", "b"], hash_fn=sha3_256).root)

    def test_root_human(self, capsys):
        assert main(["root", "a"]) == EXIT_SUCCESS
        assert "Root:" in capsys.readouterr().out

    def test_empty_input_is_reported(self, capsys):
        assert main(["root", "--json"]) == EXIT_RUNTIME_ERROR
        error = json.loads(capsys.readouterr().out)
        assert error["code"] == "EMPTY_INPUT"


class TestProveAndVerify:

    def test_prove_then_verify(self, capsys, tmp_path):
        code = main(["prove", "a", "b", "c", "d", "--index", "2", "--out", "proof.json"])
        assert code == EXIT_SUCCESS
        capsys.readouterr()

        tree_root = to_hex(build(["a", "b", "c", "d"]).root)
        code, report = _run_json(
            capsys, ["verify", "c", "--proof", "proof.json", "--root", tree_root, "--json"]
        )

        assert code == EXIT_SUCCESS
        assert report["verified"] is True
        assert report["steps"] == 2

    def test_verify_wrong_element(self, capsys):
        main(["prove", "a", "b", "c", "--index", "0", "--out", "proof.json"])
        capsys.readouterr()

        code, report = _run_json(capsys, ["verify", "b", "--proof", "proof.json", "--json"])

        assert code == EXIT_VERIFICATION_FAILED
        assert report["verified"] is False

    def test_verify_from_stdin(self, capsys, monkeypatch):
        _, document = _run_json(capsys, ["prove", "x", "y", "--index", "1"])
        monkeypatch.setattr("sys.stdin", io.StringIO(json.dumps(document)))

        assert main(["verify", "y", "--proof", "-"]) == EXIT_SUCCESS
        assert "VALID" in capsys.readouterr().out

    def test_prove_after_append(self, capsys):
        _, document = _run_json(capsys, ["prove", "a", "b", "--append", "c", "--index", "2"])

        assert document["leaf_index"] == 2
        assert document["root"] == to_hex(build(["a", "b", "c"]).root)

    def test_prove_out_of_range(self, capsys):
        assert main(["prove", "a", "b", "--index", "2", "--json"]) == EXIT_RUNTIME_ERROR
        error = json.loads(capsys.readouterr().out)
        assert error["code"] == "INDEX_OUT_OF_RANGE"
        assert error["details"] == {"index": 2, "leaf_count": 2}

    def test_prove_refuses_overwrite(self, capsys, tmp_path):
        (tmp_path / "proof.json").write_text("{}")
        assert main(["prove", "a", "--index", "0", "--out", "proof.json"]) == EXIT_RUNTIME_ERROR

    def test_verify_malformed_proof(self, capsys, tmp_path):
        (tmp_path / "proof.json").write_text("not json")
        code = main(["verify", "a", "--proof", "proof.json", "--root", "0x00"])
        assert code == EXIT_RUNTIME_ERROR
        assert "PROOF_FORMAT_INVALID" in capsys.readouterr().err


class TestSetupLogging:

    def test_no_log_file_opened_when_already_configured(self, tmp_path, monkeypatch):
        root_logger = logging.getLogger()
        monkeypatch.setattr(root_logger, "handlers", [logging.NullHandler()])
        log_file = tmp_path / "arbor.log"

        setup_logging(log_file=str(log_file))
        setup_logging(log_file=str(log_file))

        assert not log_file.exists()
        assert not any(isinstance(h, logging.FileHandler) for h in root_logger.handlers)

    def test_configures_unconfigured_root(self, tmp_path, monkeypatch):
        root_logger = logging.getLogger()
        monkeypatch.setattr(root_logger, "handlers", [])
        log_file = tmp_path / "arbor.log"

        setup_logging(level="DEBUG", log_file=str(log_file))
        file_handlers = [h for h in root_logger.handlers if isinstance(h, logging.FileHandler)]
        for handler in file_handlers:
            handler.close()

        assert len(file_handlers) == 1
        assert log_file.exists()


class TestConfigCommand:

    def test_show(self, capsys):
        code, shown = _run_json(capsys, ["config"])
        assert code == EXIT_SUCCESS
        assert shown["hash_algorithm"] == "sha256"

    def test_env_applies(self, capsys, monkeypatch):
        monkeypatch.setenv("ARBOR_INSERT_STRATEGY", "incremental")
        _, shown = _run_json(capsys, ["config"])
        assert shown["insert_strategy"] == "incremental"

    def test_bad_config_file(self, capsys, tmp_path):
        (tmp_path / "bad.json").write_text(json.dumps({"hash_algorithm": "md5"}))
        assert main(["--config", "bad.json", "config"]) == EXIT_RUNTIME_ERROR
        assert "Error loading configuration" in capsys.readouterr().err
