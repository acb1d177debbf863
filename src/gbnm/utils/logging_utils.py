# ===--------------------------------------------------------------------------------------===#
#
# Part of the GBNM Project, under the Apache License v2.0.
# SPDX-License-Identifier: Apache-2.0
#
# ===--------------------------------------------------------------------------------------===#
#
# This file implements logging helpers for GBNM runs.
#
# ===--------------------------------------------------------------------------------------===#

from typing import Optional

import logging
import pathlib

TRUNCATION_SUFFIX: str = "... [TRUNCATED]"


class SizeLimitedFormatter(logging.Formatter):
    """Formatter that truncates overly long log messages.

    The limit applies to the message content only, before the timestamp and level
    are added. Long messages are cut and marked with a truncation suffix; the
    record itself is left untouched for other handlers.

    Attributes:
        max_msg_sz: Maximum length of the message content in characters.
    """

    def __init__(
        self, fmt: Optional[str] = None, datefmt: Optional[str] = None, max_msg_sz: int = 256
    ) -> None:
        """Initializes the formatter.

        Args:
            fmt: Format string for log messages.
            datefmt: Format string for the date/time portion.
            max_msg_sz: Maximum message length, at least the suffix length.

        Raises:
            ValueError: If max_msg_sz cannot hold the truncation suffix.
        """
        if max_msg_sz < len(TRUNCATION_SUFFIX):
            raise ValueError(
                f"max_msg_sz must be at least {len(TRUNCATION_SUFFIX)} characters "
                "to accommodate the truncation indicator"
            )

        super().__init__(fmt, datefmt)
        self.max_msg_sz: int = max_msg_sz

    def format(self, record: logging.LogRecord) -> str:
        message: str = record.getMessage()
        if len(message) <= self.max_msg_sz:
            return super().format(record)

        original_msg, original_args = record.msg, record.args
        record.msg = message[: self.max_msg_sz - len(TRUNCATION_SUFFIX)] + TRUNCATION_SUFFIX
        record.args = None
        try:
            return super().format(record)
        finally:
            record.msg, record.args = original_msg, original_args


def get_logger(
    name: str = "gbnm",
    results_dir: Optional[pathlib.Path] = None,
    append_mode: bool = False,
    level: int = logging.INFO,
    max_msg_sz: int = 256,
) -> logging.Logger:
    """Creates a logger writing to stdout and, optionally, to a results file.

    Handlers are attached only the first time a given logger is requested, so
    repeated calls return the same configured logger.

    Args:
        name: Logger name.
        results_dir: Directory for a ``results.log`` file. If None, logs only to stdout.
        append_mode: If True, append to an existing log file; if False, overwrite.
        level: Logging level of the logger and its handlers.
        max_msg_sz: Maximum size for log messages in characters.

    Returns:
        The configured Logger.
    """
    if results_dir:
        sanitized_dir: str = str(results_dir).replace("/", "_").replace("\\", "_")
        name = f"{name}.{sanitized_dir}"

    logger: logging.Logger = logging.getLogger(name)
    if not logger.handlers:
        logger.setLevel(level)
        log_formatter = SizeLimitedFormatter(
            "%(asctime)s | %(levelname)s | %(name)s | %(message)s", max_msg_sz=max_msg_sz
        )
        logger.propagate = False

        stream_handler: logging.StreamHandler = logging.StreamHandler()
        stream_handler.setFormatter(log_formatter)
        logger.addHandler(stream_handler)

        if results_dir:
            fh: logging.FileHandler = logging.FileHandler(
                pathlib.Path(results_dir).joinpath("results.log"), mode="a" if append_mode else "w"
            )
            fh.setLevel(level)
            fh.setFormatter(log_formatter)
            logger.addHandler(fh)

    return logger
