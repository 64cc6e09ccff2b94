"""Environment-driven configuration."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Optional

DEFAULT_ORIGINS = [
    "http://localhost:8080",
    "http://localhost:3000",
    "http://127.0.0.1:8080",
]

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass
class LinenConfig:
    vat_rate: Decimal = Decimal("0.15")
    express_surcharge: Decimal = Decimal("0.5")
    data_file: Optional[str] = None
    log_level: str = "INFO"
    allowed_origins: list[str] = field(default_factory=lambda: list(DEFAULT_ORIGINS))

    @property
    def allow_all_origins(self) -> bool:
        return "*" in self.allowed_origins


def _decimal_env(name: str, default: Decimal) -> Decimal:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = Decimal(raw)
    except InvalidOperation:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None
    if value < 0:
        raise ValueError(f"{name} must not be negative, got {raw!r}")
    return value


def load_config() -> LinenConfig:
    """Read configuration from the environment, falling back to defaults.

    Set ALLOWED_ORIGINS="*" to allow any origin.
    """
    origins_env = os.environ.get("ALLOWED_ORIGINS", "")
    origins = [o.strip() for o in origins_env.split(",") if o.strip()]

    return LinenConfig(
        vat_rate=_decimal_env("LINEN_VAT_RATE", Decimal("0.15")),
        express_surcharge=_decimal_env("LINEN_EXPRESS_SURCHARGE", Decimal("0.5")),
        data_file=os.environ.get("LINEN_DATA_FILE") or None,
        log_level=os.environ.get("LINEN_LOG_LEVEL", "INFO").upper(),
        allowed_origins=origins or list(DEFAULT_ORIGINS),
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
