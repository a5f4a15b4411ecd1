from __future__ import annotations

import os
from dataclasses import dataclass


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    # Target
    interface: str = os.getenv("DNSOPT_INTERFACE", "Wi-Fi")

    # Probing
    ping_count: int = _env_int("DNSOPT_PING_COUNT", 3)
    probe_timeout_s: float = _env_float("DNSOPT_PROBE_TIMEOUT_S", 5.0)
    probe_retries: int = _env_int("DNSOPT_PROBE_RETRIES", 0)
    parallel: int = _env_int("DNSOPT_PARALLEL", 4)
    latency_mode: str = os.getenv("DNSOPT_LATENCY_MODE", "rtt")

    # Applying
    settle_delay_s: float = _env_float("DNSOPT_SETTLE_DELAY_S", 2.0)
    # Limit for scutil/networksetup/resolvectl invocations.
    command_timeout_s: float = _env_float("DNSOPT_COMMAND_TIMEOUT_S", 15.0)


settings = Settings()
