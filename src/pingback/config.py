"""Typed configuration loader for pingback."""

from __future__ import annotations

import os
import tomllib
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

from .contracts.error import BadInputError, IOErrorEnvelope
from .core.aggregation import DEFAULT_GROUP_SIZE, DEFAULT_HISTORY_FACTOR, DEFAULT_LEVELS
from .render.legend import DEFAULT_LEGEND_STEPS

DEFAULT_INTERVAL_MS = 1000


@dataclass
class ProbePolicy:
    target: str = ""
    interval_ms: int = DEFAULT_INTERVAL_MS

    @property
    def interval_s(self) -> float:
        return self.interval_ms / 1000

    def validate(self) -> None:
        if not self.target.strip():
            raise BadInputError(
                "probe.target is required",
                hint="Pass --address <IP_or_host> or set PINGBACK_TARGET.",
            )
        if self.interval_ms <= 0:
            raise BadInputError("probe.interval_ms must be > 0")


@dataclass
class AggregationPolicy:
    group_size: int = DEFAULT_GROUP_SIZE
    levels: int = DEFAULT_LEVELS
    history_factor: int = DEFAULT_HISTORY_FACTOR

    def validate(self) -> None:
        if self.group_size < 2:
            raise BadInputError("aggregation.group_size must be >= 2")
        if self.levels < 1:
            raise BadInputError("aggregation.levels must be >= 1")
        if self.history_factor < 1:
            raise BadInputError("aggregation.history_factor must be >= 1")


@dataclass
class DisplayPolicy:
    legend_steps: int = DEFAULT_LEGEND_STEPS

    def validate(self) -> None:
        if self.legend_steps < 2:
            raise BadInputError("display.legend_steps must be >= 2")


def _section(data: Mapping[str, Any], name: str, cls: type[Any]) -> Any:
    section = data.get(name, {})
    if not isinstance(section, dict):
        raise BadInputError(f"[{name}] section must be a table")
    known = {item.name for item in fields(cls)}
    unknown = sorted(set(section) - known)
    if unknown:
        raise BadInputError(f"Unknown keys in [{name}]: {', '.join(unknown)}")
    for item in fields(cls):
        if item.name not in section:
            continue
        value = section[item.name]
        expected = type(item.default)
        if isinstance(value, bool) or not isinstance(value, expected):
            raise BadInputError(f"{name}.{item.name} must be of type {expected.__name__}")
    return cls(**section)


@dataclass
class AppConfig:
    probe: ProbePolicy = field(default_factory=ProbePolicy)
    aggregation: AggregationPolicy = field(default_factory=AggregationPolicy)
    display: DisplayPolicy = field(default_factory=DisplayPolicy)

    @classmethod
    def load(cls, path: Path | None, env: Mapping[str, str] | None = None) -> AppConfig:
        """Read ``path`` (if any) and apply env overrides; validation is left to the caller."""

        if path is None:
            cfg = cls()
        else:
            try:
                data = tomllib.loads(path.read_text(encoding="utf-8"))
            except FileNotFoundError as exc:
                raise BadInputError(f"Config file not found: {path}") from exc
            except tomllib.TOMLDecodeError as exc:
                raise BadInputError(f"Invalid TOML: {exc}") from exc
            except OSError as exc:
                raise IOErrorEnvelope(f"Cannot read config file {path}: {exc}") from exc
            cfg = cls.from_dict(data)
        cfg.apply_env_overrides(os.environ if env is None else env)
        return cfg

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AppConfig:
        return cls(
            probe=_section(data, "probe", ProbePolicy),
            aggregation=_section(data, "aggregation", AggregationPolicy),
            display=_section(data, "display", DisplayPolicy),
        )

    def apply_env_overrides(self, env: Mapping[str, str]) -> None:
        mapping: dict[str, tuple[object, str, Callable[[str], Any]]] = {
            "PINGBACK_TARGET": (self.probe, "target", str),
            "PINGBACK_INTERVAL_MS": (self.probe, "interval_ms", int),
            "PINGBACK_GROUP_SIZE": (self.aggregation, "group_size", int),
            "PINGBACK_LEVELS": (self.aggregation, "levels", int),
            "PINGBACK_HISTORY_FACTOR": (self.aggregation, "history_factor", int),
            "PINGBACK_LEGEND_STEPS": (self.display, "legend_steps", int),
        }
        for key, (section, attr, caster) in mapping.items():
            raw_value = env.get(key)
            if raw_value is None:
                continue
            try:
                value = caster(raw_value)
            except ValueError as exc:
                raise BadInputError(f"Invalid env override {key}={raw_value!r}") from exc
            setattr(section, attr, value)

    def apply_overrides(self, **overrides: Any) -> None:
        """Apply CLI flag values; ``None`` means the flag was not given."""

        targets: dict[str, tuple[object, str]] = {
            "target": (self.probe, "target"),
            "interval_ms": (self.probe, "interval_ms"),
            "group_size": (self.aggregation, "group_size"),
            "levels": (self.aggregation, "levels"),
            "legend_steps": (self.display, "legend_steps"),
        }
        for name, value in overrides.items():
            if value is None:
                continue
            if name not in targets:
                raise BadInputError(f"Unknown override {name}")
            section, attr = targets[name]
            setattr(section, attr, value)

    def validate(self) -> None:
        self.probe.validate()
        self.aggregation.validate()
        self.display.validate()


def load_app_config(path: str | None) -> AppConfig:
    config_path = Path(path) if path else None
    return AppConfig.load(config_path)
