from .config import DEFAULT_CONFIG_NAME, EngineConfig, load_engine_config
from .fonts import FontAtlas, FontLibrary, GlyphBitmap, PillowTextMeasurer
from .frame_engine import FrameEngine, FrameResult
from .layout_renderer import LayoutRenderer, MatrixLayoutRenderer, frame_to_image
from .template_store import HotReloader, PublishResult, TemplateSnapshot, TemplateStore

__all__ = [
    "DEFAULT_CONFIG_NAME",
    "EngineConfig",
    "FontAtlas",
    "FontLibrary",
    "FrameEngine",
    "FrameResult",
    "GlyphBitmap",
    "HotReloader",
    "LayoutRenderer",
    "MatrixLayoutRenderer",
    "PillowTextMeasurer",
    "PublishResult",
    "TemplateSnapshot",
    "TemplateStore",
    "frame_to_image",
    "load_engine_config",
]
