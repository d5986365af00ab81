from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from PySide6.QtCore import QtMsgType, qInstallMessageHandler

LOGGER_NAME = "Daydream"

_QT_LEVELS = {
    QtMsgType.QtDebugMsg: logging.DEBUG,
    QtMsgType.QtInfoMsg: logging.INFO,
    QtMsgType.QtWarningMsg: logging.WARNING,
    QtMsgType.QtCriticalMsg: logging.ERROR,
    QtMsgType.QtFatalMsg: logging.CRITICAL,
}

# Logger receiving Qt messages; None until the bridge is installed.
_qt_target: logging.Logger | None = None


def _forward_qt_message(mode, context, message: str) -> None:
    if _qt_target is None:
        return
    category = str(getattr(context, "category", "") or "").strip()
    prefix = f"[Qt:{category}] " if category else "[Qt] "
    _qt_target.log(_QT_LEVELS.get(mode, logging.INFO), "%s%s", prefix, message)


def _bridge_qt_messages(logger: logging.Logger) -> None:
    global _qt_target
    if _qt_target is None:
        qInstallMessageHandler(_forward_qt_message)
    _qt_target = logger


def setup_logger(log_dir: Path, debug: bool = False) -> logging.Logger:
    """
    Configure the scene logger: rotating ``app.log`` plus console output in debug mode.

    Qt's own warnings are routed into the same logger.
    """
    log_dir.mkdir(parents=True, exist_ok=True)
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if debug else logging.INFO)
    logger.propagate = False

    # setup may run more than once (tests, restarts)
    if logger.handlers:
        _bridge_qt_messages(logger)
        return logger

    file_handler = RotatingFileHandler(
        log_dir / "app.log",
        maxBytes=2 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(
            "[%(asctime)s] [%(levelname)s] [%(module)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    logger.addHandler(file_handler)

    if debug:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.DEBUG)
        console_handler.setFormatter(logging.Formatter("[%(levelname)s] %(module)s: %(message)s"))
        logger.addHandler(console_handler)

    _bridge_qt_messages(logger)
    return logger
