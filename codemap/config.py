"""
Analyzer configuration.

Values come from the environment (optionally a local .env file):

    CODEMAP_HIGH_COMPLEXITY_THRESHOLD  (default: 5)
    CODEMAP_MAX_WORKERS                (default: 1, sequential)
    CODEMAP_MAX_SOURCE_BYTES           (default: 2 MiB)
    CODEMAP_LOG_LEVEL                  (default: INFO)
    CODEMAP_COMPONENT_BASES            (default: Component,PureComponent)
    CODEMAP_STATE_HOOK                 (default: useState)
    CODEMAP_EFFECT_HOOK                (default: useEffect)
"""

import logging
import os
from dataclasses import dataclass
from typing import FrozenSet, Optional

import dotenv

dotenv.load_dotenv()


DEFAULT_HIGH_COMPLEXITY_THRESHOLD = 5
DEFAULT_MAX_SOURCE_BYTES = 2 * 1024 * 1024


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got '{raw}'")


@dataclass(frozen=True)
class AnalyzerConfig:
    """Tunables for one CodeAnalyzer."""
    high_complexity_threshold: int = DEFAULT_HIGH_COMPLEXITY_THRESHOLD
    max_workers: int = 1
    max_source_bytes: int = DEFAULT_MAX_SOURCE_BYTES
    log_level: str = "INFO"
    component_bases: FrozenSet[str] = frozenset({"Component", "PureComponent"})
    state_hook: str = "useState"
    effect_hook: str = "useEffect"

    @classmethod
    def from_env(cls) -> "AnalyzerConfig":
        bases = os.getenv("CODEMAP_COMPONENT_BASES", "Component,PureComponent")
        return cls(
            high_complexity_threshold=_int_env(
                "CODEMAP_HIGH_COMPLEXITY_THRESHOLD", DEFAULT_HIGH_COMPLEXITY_THRESHOLD
            ),
            max_workers=max(1, _int_env("CODEMAP_MAX_WORKERS", 1)),
            max_source_bytes=_int_env("CODEMAP_MAX_SOURCE_BYTES", DEFAULT_MAX_SOURCE_BYTES),
            log_level=os.getenv("CODEMAP_LOG_LEVEL", "INFO").upper(),
            component_bases=frozenset(b.strip() for b in bases.split(",") if b.strip()),
            state_hook=os.getenv("CODEMAP_STATE_HOOK", "useState"),
            effect_hook=os.getenv("CODEMAP_EFFECT_HOOK", "useEffect"),
        )


def configure_logging(config: Optional[AnalyzerConfig] = None) -> None:
    """Set up root logging for the CLI and the API process."""
    config = config or AnalyzerConfig.from_env()
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
