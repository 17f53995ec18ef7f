"""
Tests for the command line entry point.
"""

import io
import json
import logging
import threading

import pytest

import main
from main import EXIT_FAILURE, EXIT_NO_DIFFERENCES, EXIT_OK, CommandLineArgs, StartupMode, parse_arguments
from evidence_support.services.hashing import HashAlgorithm
from evidence_support.services.notifications import LoggingNotificationSink

from conftest import write_file


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class TestParseArguments:

    def test_defaults_to_monitor(self):
        args = parse_arguments([])
        assert args.mode == StartupMode.MONITOR
        assert args.log_level == "INFO"
        assert args.hash_algorithm == HashAlgorithm.SHA256

    def test_diff_mode(self):
        args = parse_arguments(["--diff", "a", "b", "-o", "out", "-k", "--hash", "xxh64"])
        assert args.mode == StartupMode.DIFF
        assert (args.earlier_path, args.later_path, args.output_path) == ("a", "b", "out")
        assert args.keep_snapshots is True
        assert args.hash_algorithm == HashAlgorithm.XXH64

    def test_diff_requires_output(self):
        with pytest.raises(SystemExit):
            parse_arguments(["--diff", "a", "b"])

    def test_verbose_sets_debug_level(self):
        assert parse_arguments(["-v"]).log_level == "DEBUG"


class TestSetupLogging:

    def test_replaces_handlers_and_writes_file(self, tmp_path):
        stale = logging.NullHandler()
        logging.getLogger().addHandler(stale)
        log_file = tmp_path / "logs" / "evidence.log"

        root = main.setup_logging("debug", log_file)
        logging.debug("SetupTest - hello")
        for handler in root.handlers:
            handler.flush()

        assert stale not in root.handlers
        assert root.level == logging.DEBUG
        assert [type(h) for h in root.handlers] == [logging.StreamHandler, logging.FileHandler]
        assert root.handlers[0].stream is main.sys.stderr
        assert "hello" in log_file.read_text(encoding="utf-8")
        root.handlers[1].close()


class TestMain:

    def test_diff_writes_evidence(self, tmp_path, capsys):
        a, b = tmp_path / "s1", tmp_path / "s2"
        write_file(a / "T" / "app.log", "old")
        write_file(b / "T" / "app.log", "old and new")

        code = main.main(["--diff", str(a), str(b), "-o", str(tmp_path / "ev")])

        assert code == EXIT_OK
        assert (tmp_path / "ev" / "T" / "app.log").read_text(encoding='utf-8') == "old and new"
        assert not a.exists()
        assert "Evidence written to" in capsys.readouterr().out

    def test_diff_without_changes(self, tmp_path):
        a, b = tmp_path / "s1", tmp_path / "s2"
        write_file(a / "T" / "app.log", "same")
        write_file(b / "T" / "app.log", "same")

        code = main.main(["--diff", str(a), str(b), "-o", str(tmp_path / "ev"), "--keep-snapshots"])

        assert code == EXIT_NO_DIFFERENCES
        assert a.exists() and b.exists()
        assert not (tmp_path / "ev").exists()

    def test_snapshot_mode(self, tmp_path):
        write_file(tmp_path / "logs" / "app.log", "x")
        config = tmp_path / "settings.json"
        config.write_text(json.dumps({
            "settings": {"evidence_save_path": str(tmp_path / "out"), "keep_snapshot": False},
            "targets": {"AppLog": str(tmp_path / "logs" / "*.log")},
        }), encoding='utf-8')

        code = main.main(["-c", str(config), "--snapshot", str(tmp_path / "snap")])

        assert code == EXIT_OK
        assert (tmp_path / "snap" / "AppLog" / "app.log").exists()

    def test_init_config_then_refuses_overwrite(self, tmp_path):
        config = tmp_path / "settings.json"

        assert main.main(["-c", str(config), "--init-config"]) == EXIT_OK
        data = json.loads(config.read_text(encoding='utf-8'))
        assert data["settings"]["keep_snapshot"] is False
        assert "AppLog" in data["targets"]

        assert main.main(["-c", str(config), "--init-config"]) == EXIT_FAILURE

    def test_missing_config_fails(self, tmp_path, capsys):
        code = main.main(["-c", str(tmp_path / "absent.json"), "--snapshot", str(tmp_path / "snap")])

        assert code == EXIT_FAILURE
        assert "Settings file not found" in capsys.readouterr().out


class TestRunMonitor:

    def test_closed_stdin_does_not_end_session(self, tmp_path, monkeypatch):
        log = write_file(tmp_path / "logs" / "app.log", "line 1\n")
        config = tmp_path / "settings.json"
        config.write_text(json.dumps({
            "settings": {"evidence_save_path": str(tmp_path / "out"), "keep_snapshot": False},
            "targets": {"AppLog": str(tmp_path / "logs" / "*.log")},
        }), encoding='utf-8')
        monkeypatch.setattr(main.sys, "stdin", io.StringIO(""))
        monkeypatch.setattr(main, "_install_stop_handlers", lambda event: None)

        stop = threading.Event()
        result = []
        runner = threading.Thread(
            target=lambda: result.append(
                main.run_monitor(CommandLineArgs(config_file=str(config)), LoggingNotificationSink(), stop)
            ),
            daemon=True,
        )
        runner.start()
        runner.join(0.5)

        assert runner.is_alive()
        assert list((tmp_path / "out").glob("*/snapshot1/AppLog/app.log"))

        with open(log, 'a', encoding='utf-8') as f:
            f.write("line 2\n")
        stop.set()
        runner.join(10)

        assert result == [EXIT_OK]
        evidence = list((tmp_path / "out").glob("*/evidence/AppLog/app.log"))
        assert [p.read_text(encoding='utf-8') for p in evidence] == ["line 1\nline 2\n"]
