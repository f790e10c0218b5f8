from __future__ import annotations

import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

ENV_PREFIX = "VARIATION_VIEWER_"


def _get(env: Mapping[str, str], name: str, default: Any, cast: Callable[[str], Any] | None = None) -> Any:
    raw = env.get(ENV_PREFIX + name)
    if raw is None or raw == "":
        return default
    try:
        return cast(raw) if cast else raw
    except ValueError as e:
        raise ValueError(f"{ENV_PREFIX}{name}: cannot parse {raw!r}") from e


@dataclass(frozen=True)
class ViewerSettings:
    # Seconds between automatic forward steps while playback runs.
    playback_seconds: float = 1.0
    log_level: str = "INFO"
    log_file: str | None = None
    log_rotation: str = "10 MB"
    log_retention: str = "1 week"
    max_variation_depth: int | None = 8

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> ViewerSettings:
        env = os.environ if env is None else env
        depth = _get(env, "MAX_VARIATION_DEPTH", cls.max_variation_depth, int)
        settings = cls(
            playback_seconds=_get(env, "PLAYBACK_SECONDS", cls.playback_seconds, float),
            log_level=str(_get(env, "LOG_LEVEL", cls.log_level)).upper(),
            log_file=_get(env, "LOG_FILE", None),
            log_rotation=_get(env, "LOG_ROTATION", cls.log_rotation),
            log_retention=_get(env, "LOG_RETENTION", cls.log_retention),
            max_variation_depth=depth if depth and depth > 0 else None,
        )
        if settings.playback_seconds <= 0:
            raise ValueError(f"{ENV_PREFIX}PLAYBACK_SECONDS: must be positive")
        return settings

    def notation_options(self) -> dict[str, Any]:
        return {"show_move_numbers": True, "max_variation_depth": self.max_variation_depth}
