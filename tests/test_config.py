import argparse
import logging
import os
from logging.handlers import RotatingFileHandler

import pytest

from config.config import parse_args, parse_value_list, parse_positive, extract_config
from config.logconf import setup_logger, ConsoleFormatter, SweepProgress, strip_colors
from config_loader import load, read_toml


def test_logger_creation_defaults(tmp_path):
    log_directory = str(tmp_path / "logs")
    logger = setup_logger(name="unittest_logger", log_dir=log_directory)
    assert logger.name == "unittest_logger"
    file_handler = None
    stream_handler = None
    for handler in logger.handlers:
        if isinstance(handler, logging.FileHandler):
            file_handler = handler
        elif isinstance(handler, logging.StreamHandler):
            stream_handler = handler
    assert file_handler is not None
    assert stream_handler is not None
    assert os.path.exists(log_directory)


def test_logger_without_rotation_creates_regular_file_handler(tmp_path):
    logger = setup_logger(name="unittest_logger_no_rotate", log_dir=str(tmp_path / "logs"), rotate=False)
    file_handlers = [h for h in logger.handlers if isinstance(h, logging.FileHandler)]
    assert len(file_handlers) == 1
    assert not isinstance(file_handlers[0], RotatingFileHandler)


def test_logger_file_logging_off(tmp_path):
    logger = setup_logger(name="unittest_logger_off", log_dir=str(tmp_path / "logs"), file_logging=False)
    assert not any(isinstance(h, logging.FileHandler) for h in logger.handlers)


def test_console_formatter_colours_by_level():
    formatter = ConsoleFormatter()
    record = logging.LogRecord("color_test", logging.WARNING, "", 0, "colored message", None, None)
    formatted = formatter.format(record)
    assert formatted.startswith("\033[33m")
    plain = strip_colors(formatted)
    assert "WARNING" in plain
    assert "colored message" in plain
    assert plain.endswith("]")


def test_logger_emits_log_message_to_stream(capsys, tmp_path):
    logger = setup_logger(name="unittest_logger_stream", log_dir=str(tmp_path / "logs"))
    logger.info("stream test message")
    captured = capsys.readouterr()
    assert "stream test message" in captured.err


def test_logger_with_custom_level(capsys, tmp_path):
    logger = setup_logger(name="custom_level", log_dir=str(tmp_path / "logs"), level=logging.WARNING)
    logger.info("this info should not appear")
    logger.warning("this warning should appear")
    captured = capsys.readouterr().err
    assert "this warning should appear" in captured
    assert "this info should not appear" not in captured


def test_file_logging(tmp_path):
    logger = setup_logger(name="file_logger", log_dir=str(tmp_path / "logs"))
    logger.info("file log test message")
    file_handler = next(h for h in logger.handlers if isinstance(h, logging.FileHandler))
    file_handler.flush()
    with open(file_handler.baseFilename, "r", encoding="utf-8") as f:
        assert "file log test message" in f.read()


def test_tqdm_adapter_skips_blank_writes(tmp_path):
    logger = setup_logger(name="tqdm_logger", log_dir=str(tmp_path / "logs"))
    adapter = SweepProgress(logger)
    adapter.write("\r   ")
    adapter.write("\rSweep: 50%")
    adapter.flush()
    file_handler = next(h for h in logger.handlers if isinstance(h, logging.FileHandler))
    file_handler.flush()
    with open(file_handler.baseFilename, "r", encoding="utf-8") as f:
        lines = f.read().splitlines()
    assert len(lines) == 1
    assert lines[0].endswith("Sweep: 50%")


def test_parse_value_list():
    assert parse_value_list("0.5, 1,2") == (0.5, 1.0, 2.0)
    with pytest.raises(argparse.ArgumentTypeError):
        parse_value_list("1,1")
    with pytest.raises(argparse.ArgumentTypeError):
        parse_value_list("1,-2")
    with pytest.raises(argparse.ArgumentTypeError):
        parse_value_list(" , ")


def test_parse_positive():
    assert parse_positive("0.25") == 0.25
    with pytest.raises(argparse.ArgumentTypeError):
        parse_positive("0")
    with pytest.raises(argparse.ArgumentTypeError):
        parse_positive("abc")


def test_extract_config_defaults():
    config = extract_config(parse_args([]))
    assert config["tau"] == 1.0
    assert config["sigma"] == 1.0
    assert config["lam"] == 0.1
    assert config["tau_values"] == (0.5, 1.0, 2.0)
    assert config["sigma_values"] == (0.5, 1.0, 2.0)
    assert config["lam_values"] == (0.05, 0.1, 0.2)
    assert config["n_points"] == 2001
    assert config["t_end"] == 20.0
    assert config["degenerate"] == "limit"


def test_extract_config_file_then_cli(tmp_path):
    cfg = tmp_path / "run.toml"
    cfg.write_text(
        "[kinetics]\nsigma = 2.0\nlam = 0.3\n"
        "[sweep]\nsigma_values = [1.0, 4.0]\n"
        "[time]\nn_points = 11\n",
        encoding="utf-8",
    )
    config = extract_config(parse_args(["--config", str(cfg), "--lam", "0.5", "--workers", "2"]))
    assert config["sigma"] == 2.0
    assert config["lam"] == 0.5
    assert config["sigma_values"] == (1.0, 4.0)
    assert config["n_points"] == 11
    assert config["workers"] == 2


def test_extract_config_log_dir_from_file_and_cli(tmp_path):
    cfg = tmp_path / "run.toml"
    cfg.write_text("[paths]\nresults_dir = 'out'\nlogs_dir = 'logs_here'\n", encoding="utf-8")
    config = extract_config(parse_args(["--config", str(cfg)]))
    assert config["out_dir"] == "out"
    assert config["log_dir"] == "logs_here"
    config = extract_config(parse_args(["--config", str(cfg), "--log-dir", "cli_logs"]))
    assert config["log_dir"] == "cli_logs"


def test_setup_logger_again_moves_log_file(tmp_path):
    first = setup_logger(name="moving_logger", log_dir=str(tmp_path / "a"))
    second = setup_logger(name="moving_logger", log_dir=str(tmp_path / "b"))
    assert first is second
    file_handlers = [h for h in second.handlers if isinstance(h, logging.FileHandler)]
    assert len(file_handlers) == 1
    assert os.path.dirname(file_handlers[0].baseFilename) == str(tmp_path / "b")


def test_extract_config_rejects_bad_values(tmp_path):
    with pytest.raises(ValueError):
        extract_config(parse_args(["--n-points", "1"]))
    with pytest.raises(ValueError):
        extract_config(parse_args(["--workers", "0"]))
    with pytest.raises(ValueError):
        extract_config(parse_args(["--config", str(tmp_path / "missing.toml")]))


def test_cli_rejects_negative_rate():
    with pytest.raises(SystemExit):
        parse_args(["--sigma", "-1"])


def test_loader_reads_section(tmp_path):
    cfg = tmp_path / "c.toml"
    cfg.write_text("[time]\nt_end = 5.0\n", encoding="utf-8")
    assert load("time", cfg) == {"t_end": 5.0}
    assert load("sweep", cfg) == {}


def test_loader_missing_file_is_empty(tmp_path):
    assert load("kinetics", tmp_path / "nope.toml") == {}


def test_loader_rejects_unknown_sections(tmp_path):
    cfg = tmp_path / "bad.toml"
    cfg.write_text("[plots]\ndpi = 10\n", encoding="utf-8")
    with pytest.raises(ValueError):
        read_toml(cfg)
    with pytest.raises(ValueError):
        load("plots", cfg)
