from __future__ import annotations

import logging
import re

BEARER_RE = re.compile(r"(Bearer\s+)([A-Za-z0-9._\-]+)", re.IGNORECASE)
JWT_RE = re.compile(r"\beyJ[A-Za-z0-9_\-]+\.[A-Za-z0-9_\-]+\.[A-Za-z0-9_\-]+")
EMAIL_RE = re.compile(r"([A-Za-z0-9._%+-]+)@([A-Za-z0-9.-]+\.[A-Za-z]{2,})")


def _mask(text: str) -> str:
    text = BEARER_RE.sub(r"\1***", text)
    text = JWT_RE.sub("***", text)
    return EMAIL_RE.sub(r"\1@***", text)


class SecretMask(logging.Filter):
    """Hide session tokens and email addresses from log output."""

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = _mask(record.msg)
        if isinstance(record.args, tuple):
            record.args = tuple(_mask(a) if isinstance(a, str) else a for a in record.args)
        return True


def setup_logging(level: str = "INFO", json_mode: bool = False) -> logging.Logger:
    logger = logging.getLogger()
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    for h in list(logger.handlers):
        if getattr(h, "_jobtrail", False):
            logger.removeHandler(h)

    h = logging.StreamHandler()
    h._jobtrail = True
    fmt = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    if json_mode:
        fmt = '{"ts":"%(asctime)s","lvl":"%(levelname)s","logger":"%(name)s","msg":"%(message)s"}'
    h.setFormatter(logging.Formatter(fmt, datefmt="%Y-%m-%d %H:%M:%S"))
    h.addFilter(SecretMask())
    logger.addHandler(h)

    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("multipart").setLevel(logging.WARNING)
    return logger
