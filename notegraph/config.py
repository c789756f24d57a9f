"""Configuration loading.

Defaults live in the dataclasses below; a ``.notegraph.toml`` file in the notes
directory (or one given explicitly) overrides them table by table:

    [discovery]
    extensions = [".md"]
    ignore_file = ".gitignore"

    [layout]
    scale = 200.0
    max_steps = 1000

    [view]
    width = 1024
    max_zoom = 3.0
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

from .layout.engine import LayoutParams
from .models import NoteGraphError

CONFIG_FILENAME = ".notegraph.toml"


class ConfigError(NoteGraphError):
    pass


@dataclass
class DiscoveryConfig:
    extensions: tuple[str, ...] = (".md",)
    ignore_file: str | None = ".gitignore"


@dataclass
class ViewConfig:
    width: int = 1024
    height: int = 768
    tick_ms: int = 15
    padding: float = 20.0
    min_zoom: float = 0.1
    max_zoom: float = 3.0
    pick_threshold: float = 100.0
    scroll_divisor: float = 30.0
    point_radius: float = 3.0
    highlight_step: float = 1.0 / 120.0
    title: str = "Markdown Links"

    def __post_init__(self) -> None:
        if self.width < 1 or self.height < 1:
            raise ValueError("width and height must be at least 1")
        if self.tick_ms < 1:
            raise ValueError("tick_ms must be at least 1")
        if not 0 < self.min_zoom <= self.max_zoom:
            raise ValueError("zoom bounds must satisfy 0 < min_zoom <= max_zoom")
        if self.pick_threshold <= 0:
            raise ValueError("pick_threshold must be positive")
        if self.scroll_divisor <= 0:
            raise ValueError("scroll_divisor must be positive")
        if self.padding < 0:
            raise ValueError("padding must not be negative")
        if self.point_radius <= 0:
            raise ValueError("point_radius must be positive")


@dataclass
class Config:
    discovery: DiscoveryConfig = field(default_factory=DiscoveryConfig)
    layout: LayoutParams = field(default_factory=LayoutParams)
    view: ViewConfig = field(default_factory=ViewConfig)
    source: Path | None = None


def _coerce_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _check_types(table: str, cls: type, values: dict[str, Any]) -> dict[str, Any]:
    """Keep known keys, rejecting values whose type does not match the default."""
    defaults = cls()
    out: dict[str, Any] = {}
    for f in fields(cls):
        if f.name not in values:
            continue
        value = values[f.name]
        default = getattr(defaults, f.name)
        if isinstance(default, bool):
            ok = isinstance(value, bool)
        elif isinstance(default, float):
            ok = isinstance(value, (int, float)) and not isinstance(value, bool)
            value = float(value) if ok else value
        elif isinstance(default, int):
            ok = isinstance(value, int) and not isinstance(value, bool)
        elif isinstance(default, tuple):
            ok = isinstance(value, list) and all(isinstance(v, str) for v in value)
            value = tuple(value) if ok else value
        else:
            ok = isinstance(value, str) or (default is None and value is None)
        if not ok:
            raise ConfigError(f"[{table}] {f.name}: unexpected value {value!r}")
        out[f.name] = value
    return out


def load_config(path: Path) -> Config:
    """Load configuration from a TOML file."""
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"{path}: {e}") from e

    discovery = _check_types("discovery", DiscoveryConfig, _coerce_dict(data.get("discovery")))
    if discovery.get("ignore_file") == "":
        discovery["ignore_file"] = None
    view = _check_types("view", ViewConfig, _coerce_dict(data.get("view")))
    layout = _check_types("layout", LayoutParams, _coerce_dict(data.get("layout")))

    try:
        layout_params = LayoutParams(**layout)
    except ValueError as e:
        raise ConfigError(f"[layout] {e}") from e

    try:
        view_config = ViewConfig(**view)
    except ValueError as e:
        raise ConfigError(f"[view] {e}") from e

    return Config(
        discovery=DiscoveryConfig(**discovery),
        layout=layout_params,
        view=view_config,
        source=path,
    )


def resolve_config(root: Path, explicit: Path | None = None) -> Config:
    """Use an explicit config file, else ``root/.notegraph.toml``, else defaults."""
    if explicit is not None:
        if not explicit.is_file():
            raise ConfigError(f"Config file '{explicit}' does not exist")
        return load_config(explicit)

    candidate = root / CONFIG_FILENAME
    if root.is_dir() and candidate.is_file():
        return load_config(candidate)
    return Config()
