from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
import tomllib

from trellis_ui.style.color import RGBA, parse_color


DEFAULT_CONFIG_NAME = "trellis.toml"


@dataclass(frozen=True)
class EngineConfig:
    viewport_width: int = 800
    viewport_height: int = 600
    layout_path: Path | None = None
    default_page: str | None = None
    strict_events: bool = True
    hot_reload: bool = False
    font_paths: dict[int, str] = field(default_factory=dict)
    clear_color: RGBA = (0, 0, 0, 255)

    def __post_init__(self) -> None:
        if self.viewport_width <= 0 or self.viewport_height <= 0:
            raise ValueError("viewport width/height must be > 0")
        if self.default_page is not None and not self.default_page.strip():
            raise ValueError("default_page must be non-empty when provided")
        for font_id in self.font_paths:
            if font_id < 0:
                raise ValueError("font ids must be >= 0")

    @property
    def viewport(self) -> tuple[int, int]:
        return (self.viewport_width, self.viewport_height)


def load_engine_config(path: str | Path) -> EngineConfig:
    """Load `trellis.toml`; a directory argument means `<dir>/trellis.toml`.

    Relative `layout.path` and font paths resolve against the manifest directory.
    """

    config_path = Path(path)
    if config_path.is_dir():
        config_path = config_path / DEFAULT_CONFIG_NAME
    if not config_path.exists():
        raise FileNotFoundError(f"engine config not found: {config_path}")
    with config_path.open("rb") as f:
        raw = tomllib.load(f)
    base = config_path.parent.resolve()

    viewport = _coerce_table(raw.get("viewport", {}), "viewport")
    layout = _coerce_table(raw.get("layout", {}), "layout")
    events = _coerce_table(raw.get("events", {}), "events")
    render = _coerce_table(raw.get("render", {}), "render")
    fonts = _coerce_table(raw.get("fonts", {}), "fonts")

    layout_path = _coerce_optional_str(layout.get("path"), "layout.path")
    clear_color = _coerce_optional_str(render.get("clear_color"), "render.clear_color")
    return EngineConfig(
        viewport_width=_coerce_int(viewport.get("width", 800), "viewport.width"),
        viewport_height=_coerce_int(viewport.get("height", 600), "viewport.height"),
        layout_path=None if layout_path is None else _resolve(base, layout_path),
        default_page=_coerce_optional_str(layout.get("page"), "layout.page"),
        strict_events=_coerce_bool(events.get("strict", True), "events.strict"),
        hot_reload=_coerce_bool(layout.get("hot_reload", False), "layout.hot_reload"),
        font_paths=_coerce_fonts(fonts, base),
        clear_color=(0, 0, 0, 255) if clear_color is None else _coerce_color(clear_color, "render.clear_color"),
    )


def _resolve(base: Path, raw: str) -> Path:
    path = Path(raw).expanduser()
    return path if path.is_absolute() else (base / path)


def _coerce_table(value: object, field_name: str) -> dict[str, object]:
    if not isinstance(value, dict):
        raise ValueError(f"{field_name} must be a table")
    return value


def _coerce_int(value: object, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{field_name} must be an integer")
    return value


def _coerce_bool(value: object, field_name: str) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"{field_name} must be a boolean")
    return value


def _coerce_optional_str(value: object, field_name: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"{field_name} must be a string if provided")
    return value


def _coerce_color(value: str, field_name: str) -> RGBA:
    try:
        return parse_color(value)
    except ValueError as exc:
        raise ValueError(f"{field_name}: {exc}") from exc


def _coerce_fonts(fonts: dict[str, object], base: Path) -> dict[int, str]:
    out: dict[int, str] = {}
    for key, value in fonts.items():
        try:
            font_id = int(key)
        except ValueError as exc:
            raise ValueError(f"fonts keys must be integer font ids, got `{key}`") from exc
        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"fonts.{key} must be a non-empty path")
        out[font_id] = str(_resolve(base, value))
    return out
