from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
import sys

from trellis_ui.binding import MappingBindingContext
from trellis_ui.errors import CompileError
from trellis_ui.layout.solver import solve
from trellis_ui.layout.tree import LayoutTree, Viewport
from trellis_ui.template.compiler import compile_markup
from trellis_ui.template.nodes import CompiledTemplate

from trellis_core.core.config import EngineConfig, load_engine_config
from trellis_core.core.fonts import FontLibrary, PillowTextMeasurer
from trellis_core.core.layout_renderer import MatrixLayoutRenderer, frame_to_image


LOGGER = logging.getLogger("trellis")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="trellis")
    parser.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    parser.add_argument("--config", type=Path, default=None, help="Path to trellis.toml (or its directory).")
    sub = parser.add_subparsers(dest="command", required=True)

    compile_cmd = sub.add_parser("compile", help="Compile a layout file and print its pages and reusables.")
    compile_cmd.add_argument("layout", type=Path, nargs="?", default=None)

    for name, help_text in (
        ("layout", "Solve one frame and print element rectangles as JSON."),
        ("render", "Solve one frame and rasterize it to a PNG."),
    ):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("layout", type=Path, nargs="?", default=None)
        cmd.add_argument("--bindings", type=Path, default=None, help="JSON object of binding values.")
        cmd.add_argument("--page", default=None)
        cmd.add_argument("--width", type=int, default=None)
        cmd.add_argument("--height", type=int, default=None)
        if name == "render":
            cmd.add_argument("--out", type=Path, required=True)
    args = parser.parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")
    config = load_engine_config(args.config) if args.config is not None else EngineConfig()
    layout_path = _resolve_layout_path(args.layout, config)

    try:
        template = compile_markup(layout_path.read_text(encoding="utf-8"))
    except CompileError as exc:
        print(f"compile failed: {layout_path}: {exc}", file=sys.stderr)
        return 1

    if args.command == "compile":
        print(json.dumps(_template_summary(template), indent=2, sort_keys=True))
        return 0

    page = args.page or config.default_page
    if page is not None and page not in template.page_names:
        print(f"unknown page {page!r}; available: {', '.join(template.page_names)}", file=sys.stderr)
        return 1

    fonts = FontLibrary(config.font_paths)
    tree = _solve_once(template, args, config, PillowTextMeasurer(fonts))

    if args.command == "layout":
        print(json.dumps(tree.to_dict(), indent=2))
        return 0

    if args.command == "render":
        renderer = MatrixLayoutRenderer(fonts=fonts, clear_color=config.clear_color)
        image = frame_to_image(renderer.render(tree))
        args.out.parent.mkdir(parents=True, exist_ok=True)
        image.save(args.out)
        print(f"rendered {tree.page} {image.width}x{image.height} -> {args.out}")
        return 0

    raise RuntimeError(f"unsupported command: {args.command}")


def _resolve_layout_path(layout: Path | None, config: EngineConfig) -> Path:
    if layout is not None:
        return layout
    if config.layout_path is not None:
        return config.layout_path
    raise SystemExit("a layout path is required (argument or [layout].path in trellis.toml)")


def _solve_once(
    template: CompiledTemplate,
    args: argparse.Namespace,
    config: EngineConfig,
    measurer: PillowTextMeasurer,
) -> LayoutTree:
    width = args.width if args.width is not None else config.viewport_width
    height = args.height if args.height is not None else config.viewport_height
    return solve(
        template,
        MappingBindingContext(_load_bindings(args.bindings)),
        Viewport(width, height),
        page=args.page or config.default_page,
        measurer=measurer,
    )


def _load_bindings(path: Path | None) -> dict[str, object]:
    if path is None:
        return {}
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError("bindings file must contain a JSON object")
    return data


def _template_summary(template: CompiledTemplate) -> dict[str, object]:
    return {
        "pages": list(template.page_names),
        "reusables": {
            name: [param.local for param in reusable.params.values()]
            for name, reusable in sorted(template.reusables.items())
        },
    }


if __name__ == "__main__":
    raise SystemExit(main())
