"""
Minimal logging context for Arrmeta.
Single place to control all output: screen + file, with flush.
"""
import json
import os
from pathlib import Path
from datetime import datetime
from typing import Any, Optional

from rich.console import Console
from rich.text import Text

from arrmeta.__version__ import __version__

MAX_LOGGED_BODY_CHARS = 5000

_PREFIX_STYLES: tuple[tuple[str, str], ...] = (
    ("[INFO]", "cyan"),
    ("[WARNING]", "yellow"),
    ("[ERROR]", "red"),
    ("[DEBUG]", "grey50"),
)


class ArrmetaLogger:
    """Minimal logger: print to screen + file, always flush"""

    def __init__(self, log_file: Optional[Path] = None, debug: bool = False, console: Optional[Console] = None):
        self.log_file = log_file
        self._file_handle = None
        self._start_time = datetime.now()
        self.debug_mode = debug
        self._console = console or Console(highlight=False)

        if log_file:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            self._file_handle = open(log_file, 'w', buffering=1, encoding='utf-8')  # Line buffered, UTF-8

        self.debug(f"Started Arrmeta {__version__}")

    def _screen_text(self, line: str) -> Text:
        # Text() keeps brackets literal; only known prefixes get a style.
        text = Text(line)
        for token, style in _PREFIX_STYLES:
            start = line.find(token)
            if start >= 0:
                text.stylize(style, start, start + len(token))
        return text

    def log(self, msg: str, prefix: str = ""):
        """Log to screen and file"""
        output = f"{prefix}{msg}" if prefix else msg

        self._console.print(self._screen_text(output))

        if self._file_handle:
            self._file_handle.write(output + "\n")
            self._file_handle.flush()
            os.fsync(self._file_handle.fileno())

    def info(self, msg: str):
        """Info message"""
        self.log(msg, "[INFO] ")

    def warning(self, msg: str):
        """Warning message"""
        self.log(msg, "[WARNING] ")

    def error(self, msg: str):
        """Error message"""
        self.log(msg, "[ERROR] ")

    def debug(self, msg: str):
        """Debug message (only shown in debug mode)"""
        if self.debug_mode:
            timestamp = datetime.now().strftime('%H:%M:%S.%f')[:-3]
            self.log(msg, f"[{timestamp}] [DEBUG] ")

    def api_request(self, method: str, url: str, body: Any = None):
        """Log API request (debug mode only)"""
        if self.debug_mode:
            timestamp = datetime.now().strftime('%H:%M:%S.%f')[:-3]
            self.log(f"API Request: {method} {url}", f"[{timestamp}] ")
            if body is not None:
                self.log(f"  Body: {json.dumps(body, indent=2)}", f"[{timestamp}] ")

    def api_response(self, status: int, body: str, elapsed_ms: float):
        """Log API response (debug mode only)"""
        if self.debug_mode:
            timestamp = datetime.now().strftime('%H:%M:%S.%f')[:-3]
            self.log(f"API Response ({elapsed_ms:.0f}ms): Status {status}", f"[{timestamp}] ")
            if body:
                # Truncate large responses
                if len(body) > MAX_LOGGED_BODY_CHARS:
                    body = body[:MAX_LOGGED_BODY_CHARS] + "\n  ... (truncated)"
                self.log(f"  Data: {body}", f"[{timestamp}] ")

    def close(self):
        """Close file handle with goodbye message"""
        if self._file_handle:
            end_time = datetime.now()
            elapsed = end_time - self._start_time
            goodbye = f"({end_time.strftime('%H:%M:%S')}  Ended session, elapsed {elapsed.total_seconds():.1f}s)"
            self._file_handle.write(goodbye + "\n")
            self._file_handle.close()
            self._file_handle = None

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


# Global instance (set by the CLI)
_logger: Optional[ArrmetaLogger] = None

def set_logger(logger: ArrmetaLogger):
    """Set global logger instance"""
    global _logger
    _logger = logger

def get_logger() -> ArrmetaLogger:
    """Get global logger instance"""
    global _logger
    if _logger is None:
        # Fallback: create stdout-only logger
        _logger = ArrmetaLogger()
    return _logger

# Convenience functions
def log(msg: str):
    get_logger().log(msg)

def info(msg: str):
    get_logger().info(msg)

def warning(msg: str):
    get_logger().warning(msg)

def error(msg: str):
    get_logger().error(msg)

def debug(msg: str):
    get_logger().debug(msg)
