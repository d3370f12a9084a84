from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from polefield.core.params import ControlParameters


def _parse_params(pairs) -> ControlParameters:
    values = {}
    for pair in pairs or []:
        key, sep, raw = pair.partition("=")
        if not sep:
            print(f"[WARNING] ignoring --param {pair!r} (expected key=value)", file=sys.stderr)
            continue
        try:
            values[key] = json.loads(raw)
        except ValueError:
            values[key] = raw
    return ControlParameters.from_mapping(values)


def render_frame(out: Path, width: int, height: int, time_ms: float, params: ControlParameters, theme: str) -> Path:
    from polefield.core.compositor import Compositor
    from polefield.core.types import Raster, Theme
    from polefield.utils.image_ops import encode_png

    compositor = Compositor(Raster(width, height), params=params)
    compositor.advance(time_ms)
    buf = compositor.render(Theme.coerce(theme))
    out.write_bytes(encode_png(buf))
    return out


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="polefield", description="Animated four-pole color field")
    parser.add_argument("--width", type=int, default=512)
    parser.add_argument("--height", type=int, default=512)
    parser.add_argument("--param", action="append", metavar="KEY=VALUE",
                        help="control parameter, e.g. animationPattern=curl (repeatable)")
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("gui", help="open the interactive window")

    web = sub.add_parser("web", help="serve the browser preview")
    web.add_argument("--port", type=int, default=5000)
    web.add_argument("--no-browser", action="store_true")

    render = sub.add_parser("render", help="write one frame as PNG")
    render.add_argument("out", type=Path)
    render.add_argument("--time", type=float, default=0.0, help="frame clock in ms")
    render.add_argument("--theme", choices=("light", "dark"), default="light")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    params = _parse_params(args.param)
    command = args.command or "gui"

    if command == "render":
        path = render_frame(args.out, args.width, args.height, args.time, params, args.theme)
        print(f"[OK] wrote {path}", file=sys.stderr)
        return 0
    if command == "web":
        from polefield.web import serve
        serve(args.width, args.height, args.port, open_browser=not args.no_browser, params=params)
        return 0

    from polefield.gui import main as gui_main
    return gui_main(args.width, args.height, params)


if __name__ == "__main__":
    sys.exit(main())
