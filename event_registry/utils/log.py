"""Console and file logging for application channels."""

import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import IO, List, Optional

from ..config import LoggingConfig
from .formatters import format_date

DEBUG_LOG_FILENAME = "debug.log"

CONSOLE_FORMAT = '%(asctime)s [%(channel)s] %(message)s'
FILE_FORMAT = '[%(asctime)s] -> %(message)s'
TIME_FORMAT = '%H:%M:%S'


def setup_logging(config: LoggingConfig, log_dir: Optional[Path] = None) -> None:
    """Configure root logging with file and console handlers."""
    log_level = getattr(logging, config.level.upper(), logging.INFO)

    formatter = logging.Formatter(
        '%(asctime)s - %(levelname)s - %(name)s - %(message)s',
        datefmt=TIME_FORMAT
    )
    handlers: List[logging.Handler] = []

    if config.show_in_console:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    if config.write_to_file:
        target_dir = Path(log_dir or config.log_dir)
        target_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(target_dir / DEBUG_LOG_FILENAME, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    logging.basicConfig(
        level=logging.DEBUG if config.write_to_file else log_level,
        handlers=handlers or [logging.NullHandler()],
        force=True
    )


class ChannelLogger:
    """Named log channel writing to the console and a dated log file.

    Channels can be nested: a child shows its whole ancestry in console
    lines ("app->db") and writes its file under its parent's directory.
    Files live in <log_dir>/<YYYYMMDD>/<name>.log.

    Example:
        >>> app = ChannelLogger('app', write_to_file=False)
        >>> db = ChannelLogger('db', write_to_file=False, parent=app)
        >>> db.log('connected')
        12:00:00 [app->db] connected
    """

    def __init__(
        self,
        name: str,
        write_to_file: bool = True,
        show_in_console: bool = True,
        log_dir: str | Path = '',
        parent: Optional['ChannelLogger'] = None,
        stream: Optional[IO[str]] = None,
    ):
        self.name = name
        self.write_to_file = write_to_file
        self.show_in_console = show_in_console
        self.log_dir = str(log_dir or '')
        self.parent = parent

        self._logger = logging.getLogger(f"{__name__}.{'.'.join(self.sequence())}")
        self._console_handler = logging.StreamHandler(stream or sys.stdout)
        self._console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt=TIME_FORMAT))
        self._file_handler: Optional[logging.FileHandler] = None

    @classmethod
    def from_config(cls, name: str, config: LoggingConfig,
                    parent: Optional['ChannelLogger'] = None) -> 'ChannelLogger':
        return cls(
            name,
            write_to_file=config.write_to_file,
            show_in_console=config.show_in_console,
            log_dir=config.log_dir,
            parent=parent,
        )

    def log(self, message, write_to_file: Optional[bool] = None,
            show_in_console: Optional[bool] = None) -> None:
        """Log a message to the console and/or the channel's file.

        Per-call flags can only switch an output on; the channel's own
        settings still apply.

        Args:
            message: Text, or a dict/list that is JSON-encoded
            write_to_file: Also write to the log file
            show_in_console: Also show in the console
        """
        content = self._render(message)
        record = self._logger.makeRecord(
            self._logger.name, logging.INFO, '', 0, content, None, None,
            extra={'channel': '->'.join(self.sequence())},
        )

        if self.write_to_file or write_to_file:
            self._file_for_today().handle(record)
        if self.show_in_console or show_in_console:
            self._console_handler.handle(record)

    def toggle_console(self, enabled: bool) -> None:
        self.show_in_console = enabled

    def sequence(self) -> List[str]:
        """Names from the root channel down to this one."""
        names = self.parent.sequence() if self.parent is not None else []
        names.append(self.name)
        return names

    def save_dir(self, now: Optional[datetime] = None) -> Path:
        if self.parent is not None:
            directory = self.parent.save_dir(now)
            return directory / self.log_dir if self.log_dir else directory
        return Path(self.log_dir or '.').resolve() / format_date(
            now or datetime.now(), '%year%%month%%day%'
        )

    def save_path(self, now: Optional[datetime] = None) -> Path:
        return self.save_dir(now) / f"{self.name}.log"

    def close(self) -> None:
        if self._file_handler is not None:
            self._file_handler.close()
            self._file_handler = None

    def _file_for_today(self) -> logging.FileHandler:
        path = self.save_path()
        handler = self._file_handler
        if handler is None or Path(handler.baseFilename) != path:
            self.close()
            path.parent.mkdir(parents=True, exist_ok=True)
            handler = logging.FileHandler(path, encoding='utf-8')
            handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=TIME_FORMAT))
            self._file_handler = handler
        return handler

    @staticmethod
    def _render(message) -> str:
        if isinstance(message, (dict, list)):
            return json.dumps(message, default=str)
        return str(message)
