from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

from cartsync.tenant import Currency


def _get_env(env: Mapping[str, str], *keys: str, default: str | None = None) -> str | None:
    for k in keys:
        v = env.get(k)
        if v is not None and str(v).strip() != "":
            return v.strip()
    return default


def _get_float(env: Mapping[str, str], *keys: str, default: float) -> float:
    v = _get_env(env, *keys)
    if v is None:
        return default
    return float(v)


def _get_bool(env: Mapping[str, str], *keys: str, default: bool) -> bool:
    v = _get_env(env, *keys)
    if v is None:
        return default
    return v.lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    api_url: str = "http://localhost:5000"
    timeout: float = 15.0
    tax_rate: float = 0.21
    default_currency: Currency = Currency.EUR
    login_path: str = "/auth"
    cart_fresh_seconds: float = 30.0
    wallet_fresh_seconds: float = 30.0
    log_level: str = "INFO"
    log_json: bool = False


def load_settings(env: Mapping[str, str] | None = None, dotenv_path: Path | None = None) -> Settings:
    """
    Build settings from the environment.

    A .env file is read only when env is None: dotenv_path if given,
    otherwise the nearest .env from the working directory upwards.
    """
    if env is None:
        load_dotenv(dotenv_path=dotenv_path or find_dotenv(usecwd=True))
        env = os.environ

    defaults = Settings()
    currency = _get_env(env, "CARTSYNC_DEFAULT_CURRENCY", default=defaults.default_currency.value)
    return Settings(
        api_url=_get_env(env, "CARTSYNC_API_URL", "API_URL", default=defaults.api_url) or defaults.api_url,
        timeout=_get_float(env, "CARTSYNC_TIMEOUT", default=defaults.timeout),
        tax_rate=_get_float(env, "CARTSYNC_TAX_RATE", default=defaults.tax_rate),
        default_currency=Currency((currency or "EUR").upper()),
        login_path=_get_env(env, "CARTSYNC_LOGIN_PATH", default=defaults.login_path) or defaults.login_path,
        cart_fresh_seconds=_get_float(env, "CARTSYNC_CART_FRESH_SECONDS", default=defaults.cart_fresh_seconds),
        wallet_fresh_seconds=_get_float(env, "CARTSYNC_WALLET_FRESH_SECONDS", default=defaults.wallet_fresh_seconds),
        log_level=(_get_env(env, "CARTSYNC_LOG_LEVEL", "LOG_LEVEL", default=defaults.log_level) or "INFO").upper(),
        log_json=_get_bool(env, "CARTSYNC_LOG_JSON", default=defaults.log_json),
    )


__all__ = ("Settings", "load_settings")
