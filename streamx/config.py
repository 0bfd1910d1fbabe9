"""Runtime configuration for the reference stream engine."""

from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class StreamConfig:
    """Knobs for parallel execution and splitting.

    ``max_workers`` sizes the thread pool used by ``for_each`` on a parallel
    stream.  ``split_batch_size`` is the most elements a ``Spliterator`` hands
    off per ``try_split()`` call.
    """

    max_workers: int = 4
    split_batch_size: int = 1024

    def __post_init__(self) -> None:
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")
        if self.split_batch_size < 1:
            raise ValueError(
                f"split_batch_size must be >= 1, got {self.split_batch_size}"
            )

    @classmethod
    def from_env(cls) -> "StreamConfig":
        """Build a config from ``STREAMX_*`` environment variables.

        Unset variables fall back to the dataclass defaults.
        """
        kwargs: dict[str, int] = {}
        for field_name, env_name in (
            ("max_workers", "STREAMX_MAX_WORKERS"),
            ("split_batch_size", "STREAMX_SPLIT_BATCH_SIZE"),
        ):
            raw = os.environ.get(env_name, "").strip()
            if not raw:
                continue
            try:
                kwargs[field_name] = int(raw)
            except ValueError:
                raise ValueError(f"{env_name} must be an integer, got {raw!r}") from None
        return cls(**kwargs)


_default = StreamConfig()


def default_config() -> StreamConfig:
    """Return the config used by streams created without an explicit one."""
    return _default


def set_default_config(config: StreamConfig) -> None:
    global _default
    _default = config
