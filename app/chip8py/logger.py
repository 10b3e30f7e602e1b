import logging
from datetime import datetime
from pathlib import Path
from typing import Final, List, Optional, Tuple, Union

from rich.console import Console
from rich.logging import RichHandler

console: Final[Console] = Console()

time_format: Final[str] = "%Y-%m-%d %H:%M:%S"
log_format: Final[str] = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

log: Final[logging.Logger] = logging.getLogger("chip8py")


class Chip8FileHandler(logging.Handler):
    """Appends records to a log file, holding back entries that fail to write."""

    def __init__(self, file_name: Union[str, Path]):
        super().__init__()
        self._file_name = Path(file_name)
        self._log_hold: List[Tuple[logging.LogRecord, Exception]] = []

    def _write_log_entry(self, log_entry: str) -> None:
        with open(self._file_name, "a", encoding="utf-8") as f:
            f.write(log_entry + "\n")

    def emit(self, record: logging.LogRecord) -> None:
        log_entry = self.format(record)

        self.acquire()
        try:
            if self._log_hold:
                still_failed = []
                for old_record, _ in self._log_hold:
                    try:
                        self._write_log_entry(self.format(old_record))
                    except OSError as e:
                        still_failed.append((old_record, e))
                self._log_hold = still_failed

            try:
                self._write_log_entry(log_entry)
            except OSError as e:
                self._log_hold.append((record, e))
        finally:
            self.release()

    @property
    def pending(self) -> int:
        return len(self._log_hold)


def get_time() -> str:
    return datetime.now().strftime("%Y-%m-%d_%H-%M-%S")


def setup_logging(debug: bool = False, log_dir: Optional[Path] = None) -> logging.Logger:
    """
    Install the console (rich) and file handlers on the package logger.

    Args:
        debug: Log at DEBUG level and show locals in rich tracebacks.
        log_dir: Directory for the timestamped log file. No file is written when None.

    Returns:
        The configured package logger.
    """
    for handler in list(log.handlers):
        log.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(log_format, datefmt=time_format)

    rich_handler = RichHandler(
        rich_tracebacks=True,
        show_path=True,
        enable_link_path=True,
        tracebacks_show_locals=debug,
        show_level=False,
        console=console,
    )
    log.addHandler(rich_handler)

    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = Chip8FileHandler(log_dir / f"chip8py_{get_time()}.log")
        file_handler.setFormatter(formatter)
        log.addHandler(file_handler)

    log.setLevel(logging.DEBUG if debug else logging.INFO)
    return log
