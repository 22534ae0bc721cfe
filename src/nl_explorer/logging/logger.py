import logging
import os
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path

_INITIALIZED = False

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


class TimestampRotatingFileHandler(RotatingFileHandler):
    """Size-based rotation that keeps rotated files as ``<stem>_<timestamp><suffix>``.

    The active log always lives at the configured path (e.g. ``logs/explorer.log``).
    ``backupCount`` of 0 keeps every rotated file.
    """

    def rotation_filename(self, default_name: str) -> str:
        base = Path(self.baseFilename)
        ts = datetime.now().strftime("%Y%m%d_%H%M%S")
        candidate = base.with_name(f"{base.stem}_{ts}{base.suffix or '.log'}")
        n = 1
        while candidate.exists():
            candidate = base.with_name(f"{base.stem}_{ts}_{n}{base.suffix or '.log'}")
            n += 1
        return str(candidate)

    def doRollover(self) -> None:
        if self.stream:
            self.stream.close()
            self.stream = None

        if os.path.exists(self.baseFilename):
            self.rotate(self.baseFilename, self.rotation_filename(self.baseFilename))

        if self.backupCount > 0:
            base = Path(self.baseFilename)
            rotated = sorted(
                base.parent.glob(f"{base.stem}_*{base.suffix or '.log'}"),
                key=lambda p: p.stat().st_mtime,
                reverse=True,
            )
            for old in rotated[self.backupCount:]:
                old.unlink(missing_ok=True)

        if not self.delay:
            self.stream = self._open()


def init_logging(
    log_level: str = "INFO",
    log_file: str = "logs/explorer.log",
    max_bytes: int = 5 * 1024 * 1024,
    backup_count: int = 0,
) -> None:
    """Configure root logging once per process (console + rotating file)."""
    global _INITIALIZED
    if _INITIALIZED:
        return

    level = getattr(logging, (log_level or "INFO").upper(), logging.INFO)
    handlers: list = [logging.StreamHandler()]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            TimestampRotatingFileHandler(
                log_file,
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding="utf-8",
            )
        )

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers)
    # botocore is chatty at INFO (credential lookups, endpoint resolution)
    logging.getLogger("botocore").setLevel(max(level, logging.WARNING))
    _INITIALIZED = True


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(f"nl_explorer.{name}")
