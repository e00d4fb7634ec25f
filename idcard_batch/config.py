"""Settings resolution for batch runs.

Every setting is looked up in order: command line, environment, TOML file,
built-in default. The TOML file has ``[paths]``, ``[place]`` and ``[resize]``
tables; relative paths in it are taken relative to the file itself::

    [paths]
    templates = "cards/psd"
    assets = "cards/photos"
    output = "cards/out"

    [place]
    export = "jpg"
    anchor = "center"
    x = 394
    y = 459
"""

from __future__ import annotations

import dataclasses
import os
import tomllib
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from .errors import ConfigError, InvalidDimension
from .geometry import Anchor
from .host import ExportFormat, ResampleMethod
from .orchestrator import CompositeJob, ResizeJob
from .resizer import DEFAULT_TARGET_SIZE, ResizeMode, ResizeSpec

# (table, key) -> environment variable
ENV_VARS = {
    ("paths", "templates"): "IDCARD_TEMPLATES",
    ("paths", "assets"): "IDCARD_ASSETS",
    ("paths", "input"): "IDCARD_INPUT",
    ("paths", "output"): "IDCARD_OUTPUT",
    ("place", "export"): "IDCARD_EXPORT",
    ("place", "x"): "IDCARD_TARGET_X",
    ("place", "y"): "IDCARD_TARGET_Y",
    ("place", "anchor"): "IDCARD_ANCHOR",
    ("place", "photo_size"): "IDCARD_PHOTO_SIZE",
    ("resize", "size"): "IDCARD_RESIZE_SIZE",
    ("resize", "mode"): "IDCARD_RESIZE_MODE",
    ("resize", "resample"): "IDCARD_RESAMPLE",
}
CONFIG_ENV_VAR = "IDCARD_CONFIG"


def load_config_file(path) -> Dict[str, Any]:
    path = Path(path)
    try:
        with path.open("rb") as fh:
            data = tomllib.load(fh)
    except FileNotFoundError as exc:
        raise ConfigError(f"Configuration file not found: {path}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid configuration file {path}: {exc}") from exc

    base = path.resolve().parent
    paths = data.get("paths", {})
    for key, value in list(paths.items()):
        if isinstance(value, str) and not Path(value).is_absolute():
            paths[key] = str(base / value)
    return data


def parse_size(value) -> Tuple[int, int]:
    """Parse ``"195x247"`` (or a two-item list) into ``(width, height)``."""
    if isinstance(value, (list, tuple)):
        parts = list(value)
    else:
        parts = str(value).lower().replace("×", "x").split("x")
    try:
        width, height = (int(p) for p in parts)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid size {value!r}, expected WIDTHxHEIGHT") from exc
    if width <= 0 or height <= 0:
        raise ConfigError(f"Invalid size {value!r}, width and height must be positive")
    return width, height


def _enum(kind, value):
    text = str(value).strip().lower()
    if kind is ResampleMethod:
        text = text.replace("-", "_")
    elif kind is Anchor:
        text = text.replace("_", "-")
    try:
        if kind is ExportFormat:
            return ExportFormat.parse(text)
        return kind(text)
    except ValueError as exc:
        choices = ", ".join(m.value for m in kind)
        raise ConfigError(f"Invalid {kind.__name__} {value!r}, expected one of: {choices}") from exc


def _number(value):
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid coordinate {value!r}") from exc


class Settings:
    """Layered lookup over CLI values, environment and a config file."""

    def __init__(self, cli: Optional[Mapping[str, Any]] = None,
                 env: Optional[Mapping[str, str]] = None,
                 config_path=None):
        self.cli = {k: v for k, v in (cli or {}).items() if v is not None}
        self.env = os.environ if env is None else env
        config_path = config_path or self.env.get(CONFIG_ENV_VAR)
        self.file = load_config_file(config_path) if config_path else {}

    def get(self, table: str, key: str, default: Any = None,
            convert: Optional[Callable[[Any], Any]] = None) -> Any:
        value = self.cli.get(key)
        if value is None:
            env_var = ENV_VARS.get((table, key))
            if env_var and self.env.get(env_var):
                value = self.env[env_var]
        if value is None:
            value = self.file.get(table, {}).get(key)
        if value is None:
            return default
        return convert(value) if convert else value

    def path(self, key: str, required: bool = True) -> Optional[Path]:
        value = self.get("paths", key)
        if value is None:
            if required:
                env_var = ENV_VARS[("paths", key)]
                raise ConfigError(f"No {key} folder given (use --{key} or {env_var})")
            return None
        return Path(value).expanduser()


def composite_job(settings: Settings) -> CompositeJob:
    export = settings.get("place", "export", ExportFormat.PSD, lambda v: _enum(ExportFormat, v))
    job = CompositeJob(
        templates_dir=settings.path("templates"),
        assets_dir=settings.path("assets"),
        output_dir=settings.path("output"),
        export=export,
        resample=settings.get("resize", "resample", ResampleMethod.BICUBIC_SHARPER,
                              lambda v: _enum(ResampleMethod, v)),
    )

    placement = job.effective_placement
    overrides = {}
    x = settings.get("place", "x", None, _number)
    y = settings.get("place", "y", None, _number)
    anchor = settings.get("place", "anchor", None, lambda v: _enum(Anchor, v))
    if x is not None:
        overrides["target_x"] = x
    if y is not None:
        overrides["target_y"] = y
    if anchor is not None:
        overrides["anchor"] = anchor
    if overrides:
        job = dataclasses.replace(job, placement=dataclasses.replace(placement, **overrides))

    photo_size = settings.get("place", "photo_size", None, parse_size)
    if photo_size is not None:
        job = dataclasses.replace(job, photo_size=ResizeSpec(*photo_size, ResizeMode.FIT_WITH_PADDING))
    return job


def resize_job(settings: Settings) -> ResizeJob:
    width, height = settings.get("resize", "size", DEFAULT_TARGET_SIZE, parse_size)
    mode = settings.get("resize", "mode", ResizeMode.FIT_WITH_PADDING, lambda v: _enum(ResizeMode, v))
    try:
        spec = ResizeSpec(width, height, mode)
    except InvalidDimension as exc:
        raise ConfigError(str(exc)) from exc
    return ResizeJob(
        input_dir=settings.path("input"),
        output_dir=settings.path("output"),
        spec=spec,
        resample=settings.get("resize", "resample", ResampleMethod.BICUBIC_SHARPER,
                              lambda v: _enum(ResampleMethod, v)),
    )
