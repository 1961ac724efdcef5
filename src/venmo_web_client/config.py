from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Union

import yaml
from pydantic import BaseModel, Field, ValidationInfo, field_validator

from .api.endpoints import USER_AGENT
from .api.session import CredentialSet


_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Z0-9_]+)\}")


def _expand_env_vars(value: object) -> object:
    if isinstance(value, str):
        def repl(match: re.Match[str]) -> str:
            var = match.group(1)
            return os.getenv(var, "")

        return _ENV_VAR_PATTERN.sub(repl, value)
    if isinstance(value, list):
        return [_expand_env_vars(v) for v in value]
    if isinstance(value, dict):
        return {k: _expand_env_vars(v) for k, v in value.items()}
    return value


def _env_bool(name: str, default: bool = False) -> bool:
    raw = (os.getenv(name, "") or "").strip().lower()
    if not raw:
        return bool(default)
    return raw in {"1", "true", "t", "yes", "y", "on"}


def _deep_merge(base: object, override: object) -> object:
    if isinstance(base, dict) and isinstance(override, dict):
        out = dict(base)
        for k, v in override.items():
            if k in out:
                out[k] = _deep_merge(out[k], v)
            else:
                out[k] = v
        return out
    return override


def _default_config_from_env() -> dict:
    """
    Env-only config so most users only need `.env`; a YAML file can override any of it.
    """
    return {
        "credentials": {
            "username": os.getenv("VENMO_USERNAME", ""),
            "password": os.getenv("VENMO_PASSWORD", ""),
            "bank_account_number": os.getenv("VENMO_BANK_ACCOUNT_NUMBER", ""),
        },
        "client": {
            "user_agent": os.getenv("VENMO_USER_AGENT", "") or USER_AGENT,
            "timeout_seconds": os.getenv("VENMO_TIMEOUT_SECONDS", "30"),
            "eager_device_correlation": _env_bool("VENMO_EAGER_DEVICE_CORRELATION", default=False),
        },
        "browser": {
            "headless": _env_bool("VENMO_BROWSER_HEADLESS", default=True),
            "slow_mo_ms": os.getenv("VENMO_BROWSER_SLOWMO_MS", "0"),
            "debug_dir": os.getenv("VENMO_BROWSER_DEBUG_DIR", "data/debug"),
        },
        "logging": {
            "level": os.getenv("LOG_LEVEL", "INFO"),
            "file_path": os.getenv("LOG_FILE", ""),
        },
    }


class CredentialsConfig(BaseModel):
    username: str
    password: str = Field(repr=False)
    # Only used to answer the bank-account MFA challenge.
    bank_account_number: str = Field(repr=False)

    @field_validator("username", "password", "bank_account_number", mode="before")
    @classmethod
    def _required(cls, v: object, info: ValidationInfo) -> str:
        s = str(v if v is not None else "").strip()
        if not s:
            raise ValueError(f"credentials.{info.field_name} is required (set VENMO_{info.field_name.upper()})")
        return s


class ClientConfig(BaseModel):
    user_agent: str = USER_AGENT
    # Transport-level deadline per request; the handshake itself has no timeouts.
    timeout_seconds: int = Field(default=30, gt=0)
    eager_device_correlation: bool = False


class BrowserConfig(BaseModel):
    headless: bool = True
    slow_mo_ms: int = Field(default=0, ge=0)
    debug_dir: str = "data/debug"


class LoggingConfig(BaseModel):
    level: str = "INFO"
    file_path: str = ""


class AppConfig(BaseModel):
    credentials: CredentialsConfig
    client: ClientConfig = ClientConfig()
    browser: BrowserConfig = BrowserConfig()
    logging: LoggingConfig = LoggingConfig()

    def credential_set(self) -> CredentialSet:
        c = self.credentials
        return CredentialSet(
            username=c.username,
            password=c.password,
            bank_account_number=c.bank_account_number,
        )


def load_config(path: Union[str, Path, None] = None) -> AppConfig:
    raw: dict = {}
    if path:
        p = Path(path)
        if p.exists():
            raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
            raw = _expand_env_vars(raw)  # supports ${ENV_VAR} in YAML

    merged = _deep_merge(_default_config_from_env(), raw)
    return AppConfig.model_validate(merged)
