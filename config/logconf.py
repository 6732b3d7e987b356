import logging
import multiprocessing as mp
import os
import re
import time
from logging.handlers import RotatingFileHandler

from config.constants import LOG_DIR
from utils.display import format_duration

LOGGER_NAME = "splicekin"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
CONSOLE_FORMAT = "%(asctime)s %(levelname)-8s %(message)s"

# Console colour per level; the run clock is printed in cyan.
LEVEL_COLORS = {
    logging.DEBUG: "\033[32m",
    logging.INFO: "\033[34m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[35m",
}
CLOCK_COLOR = "\033[36m"
RESET = "\033[0m"

_COLOR_CODE = re.compile(r"\x1b\[[0-9;]*m")


def strip_colors(text):
    return _COLOR_CODE.sub("", text)


class SweepProgress:
    """
    Stream handed to tqdm(file=...): every redraw of the progress bar becomes
    one log record, so sweep progress lands in the log file too.
    """

    def __init__(self, logger, level=logging.INFO):
        self.logger = logger
        self.level = level

    def write(self, text):
        # tqdm redraws with carriage returns and sends bare newlines on close
        text = text.strip("\r\n ")
        if text:
            self.logger.log(self.level, text)

    def flush(self):
        pass


class ConsoleFormatter(logging.Formatter):
    """
    Colours each console line by level and appends the time since the run started.
    """

    def __init__(self, fmt=CONSOLE_FORMAT, datefmt="%H:%M:%S"):
        super().__init__(fmt, datefmt)
        self.started = time.monotonic()

    def format(self, record):
        line = super().format(record)
        color = LEVEL_COLORS.get(record.levelno, "")
        clock = format_duration(time.monotonic() - self.started)
        return f"{color}{line}{RESET} {CLOCK_COLOR}[{clock}]{RESET}"


def _is_worker():
    return mp.current_process().name != "MainProcess"


def setup_logger(name=LOGGER_NAME, level=logging.DEBUG, log_dir=None, log_file=None,
                 rotate=True, file_logging=True, max_bytes=2 * 1024 * 1024, backup_count=5):
    """
    (Re)configure a logger with a coloured console handler and a log file.

    Calling it again replaces the handlers, which is how bin.main moves the log
    file to the directory chosen on the command line or in a config file.

    :param name: logger name; every splicekin module logs through "splicekin"
    :param level: logger and file level; the console shows INFO and above
    :param log_dir: directory for the default log file, defaults to LOG_DIR
    :param log_file: explicit log file path, defaults to <log_dir>/<name>_<YYYYMMDD>.log
    :param rotate: size-rotate the log file
    :param file_logging: write a log file at all; sweep worker processes never do
    :return: logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if file_logging and not _is_worker():
        if log_file is None:
            log_dir = str(LOG_DIR if log_dir is None else log_dir)
            os.makedirs(log_dir, exist_ok=True)
            log_file = os.path.join(log_dir, f"{name}_{time.strftime('%Y%m%d')}.log")
        if rotate:
            file_handler = RotatingFileHandler(log_file, maxBytes=max_bytes, backupCount=backup_count,
                                               encoding="utf-8")
        else:
            file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        file_handler.setLevel(level)
        logger.addHandler(file_handler)

    console = logging.StreamHandler()
    console.setFormatter(ConsoleFormatter())
    console.setLevel(max(logging.INFO, level))
    logger.addHandler(console)

    logger.propagate = False
    return logger
