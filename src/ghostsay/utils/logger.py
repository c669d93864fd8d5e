import sys
import os
import datetime
import logging
from pathlib import Path
from typing import Optional, TextIO
from ghostsay.utils.config import Config

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class Tee:
    """
    Writes everything it receives to several streams at once, like the Unix
    'tee' command. Used to mirror the terminal into the log file.
    """
    def __init__(self, *streams: TextIO):
        self.streams = list(streams)

    def write(self, data):
        for stream in self.streams:
            try:
                stream.write(data)
                stream.flush()
            except ValueError:
                # Stream already closed (log file at interpreter shutdown)
                continue
        return len(data)

    def flush(self):
        for stream in self.streams:
            try:
                stream.flush()
            except ValueError:
                continue

    def isatty(self):
        return any(hasattr(s, 'isatty') and s.isatty() for s in self.streams)

    def fileno(self):
        for s in self.streams:
            if hasattr(s, 'fileno'):
                return s.fileno()
        raise OSError("None of the streams have a fileno")


_stdout_tee: Optional[Tee] = None
_stderr_tee: Optional[Tee] = None


def setup_logging(level: int = logging.INFO) -> Path:
    """
    Creates a log file under logs/terminal (or the configured directory),
    mirrors sys.stdout and sys.stderr into it and points the logging
    module at the mirrored stdout.

    Returns:
        Path of the log file for this process.
    """
    global _stdout_tee, _stderr_tee

    logs_dir = Path(Config.section("logging").get("directory", "logs/terminal"))
    if not logs_dir.is_absolute():
        logs_dir = Config.get_project_root() / logs_dir
    logs_dir.mkdir(parents=True, exist_ok=True)

    # GhostSay_YYYYMMDD_HHMMSS_<PID>.log
    now = datetime.datetime.now()
    log_path = logs_dir / f"GhostSay_{now.strftime('%Y%m%d_%H%M%S')}_{os.getpid()}.log"
    log_file = open(log_path, "a", encoding="utf-8")

    _stdout_tee = Tee(sys.stdout, log_file)
    _stderr_tee = Tee(sys.stderr, log_file)
    sys.stdout = _stdout_tee
    sys.stderr = _stderr_tee

    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stdout, force=True)

    print(f"--- Process started: {now.isoformat()} ---")
    print(f"--- Logging to: {log_path} ---")
    return log_path
