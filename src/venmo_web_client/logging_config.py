import logging
import os
import re
from pathlib import Path
from typing import Optional


# Session material that must never reach a log line, even at DEBUG (response bodies, library logs).
_SECRET_PATTERNS = (
    re.compile(r"(Bearer\s+)[^\s\"',;]+", re.I),
    re.compile(r"((?:api_access_token|_csrf|w_fc)=)[^;\s\"',]+"),
    re.compile(r"((?:csrf-token|xsrf-token|venmo-otp-secret)[\"']?\s*[:=]\s*[\"']?)[^\s\"',;}]+", re.I),
)

REDACTED = "***"


def redact(text: str) -> str:
    for pattern in _SECRET_PATTERNS:
        text = pattern.sub(lambda m: m.group(1) + REDACTED, text)
    return text


class RedactSecretsFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        try:
            message = record.getMessage()
        except Exception:
            return True
        cleaned = redact(message)
        if cleaned != message:
            record.msg = cleaned
            record.args = None
        return True


def configure_logging(level: str = "INFO", file_path: Optional[str] = None) -> None:
    numeric_level = getattr(logging, (level or "INFO").upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler()]

    if file_path:
        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path, encoding="utf-8"))

    for handler in handlers:
        handler.addFilter(RedactSecretsFilter())

    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
        handlers=handlers,
        force=True,  # the CLI calls this twice: once from env, again after config is loaded
    )

    # gql logs full request/response bodies at INFO.
    for noisy in ("aiohttp", "gql", "gql.transport.aiohttp", "playwright"):
        logging.getLogger(noisy).setLevel(os.getenv("NOISY_LOG_LEVEL", "WARNING"))
