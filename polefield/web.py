"""polefield - web preview.

Frames are pulled by the page: each ``/frame.png?t=<ms>`` request fires one
frame on the server-side scheduler, then renders.
"""

from __future__ import annotations

import io
import sys
import threading
import webbrowser
from threading import Timer

from flask import Flask, jsonify, render_template_string, request, send_file

from polefield.core.compositor import Compositor
from polefield.core.params import ControlParameters
from polefield.core.scheduler import ManualScheduler
from polefield.core.types import HIT_RADIUS, Raster, Theme
from polefield.utils.image_ops import encode_png

HTML_TEMPLATE = """
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>polefield</title>
    <style>
        body { background: #0b0b0b; color: #fff; font-family: monospace; margin: 20px; }
        .stage { position: relative; width: {{ width }}px; height: {{ height }}px; }
        #frame { display: block; cursor: crosshair; }
        .status { position: absolute; top: 6px; left: 8px; font-size: 11px; color: #FACC15; pointer-events: none; }
        .pattern { position: absolute; top: 6px; right: 8px; font-size: 11px; color: #FACC15; pointer-events: none; }
    </style>
</head>
<body>
    <div class="stage">
        <img id="frame" width="{{ width }}" height="{{ height }}">
        <div class="status" id="status"></div>
        <div class="pattern" id="pattern"></div>
    </div>
    <script>
        const img = document.getElementById('frame');
        const HIT_RADIUS = {{ hit_radius }};
        let poles = [];
        let animated = false;
        let busy = false;

        function tick(now) {
            if (!busy) {
                busy = true;
                const next = new Image();
                next.onload = () => { img.src = next.src; busy = false; };
                next.onerror = () => { busy = false; };
                next.src = '/frame.png?t=' + now;
            }
            requestAnimationFrame(tick);
        }

        async function refreshStatus() {
            const r = await fetch('/status');
            const s = await r.json();
            document.getElementById('status').textContent = s.status;
            document.getElementById('pattern').textContent = s.pattern;
            poles = s.poles;
            animated = s.mode === 'animated';
            img.style.cursor = animated ? 'default' : 'crosshair';
        }

        function onPole(x, y) {
            return !animated && poles.some(p => Math.hypot(x - p[0], y - p[1]) <= HIT_RADIUS);
        }

        function send(type, e) {
            const rect = img.getBoundingClientRect();
            fetch('/pointer', {
                method: 'POST',
                headers: {'Content-Type': 'application/json'},
                body: JSON.stringify({
                    type: type,
                    x: e.clientX - rect.left,
                    y: e.clientY - rect.top,
                    touch: e.pointerType === 'touch'
                })
            }).then(r => r.json()).then(res => {
                if (res.poles) poles = res.poles;
                if (res.haptic && navigator.vibrate) navigator.vibrate(10);
            });
        }

        // block scroll/zoom only for touches that start on a pole
        let dragging = false;
        img.addEventListener('touchstart', e => {
            const rect = img.getBoundingClientRect();
            const t = e.touches[0];
            dragging = onPole(t.clientX - rect.left, t.clientY - rect.top);
            if (dragging) e.preventDefault();
        }, {passive: false});
        img.addEventListener('touchmove', e => {
            if (dragging) e.preventDefault();
        }, {passive: false});
        img.addEventListener('touchend', () => { dragging = false; });
        img.addEventListener('touchcancel', () => { dragging = false; });

        img.addEventListener('pointerdown', e => send('press', e));
        img.addEventListener('pointermove', e => send('move', e));
        img.addEventListener('pointerup', e => send('release', e));
        img.addEventListener('pointerleave', e => send('leave', e));
        img.addEventListener('pointercancel', e => send('leave', e));
        img.addEventListener('dragstart', e => e.preventDefault());

        refreshStatus();
        setInterval(refreshStatus, 1000);
        requestAnimationFrame(tick);
    </script>
</body>
</html>
"""


def create_app(width: int = 512, height: int = 512, params: ControlParameters | None = None) -> Flask:
    app = Flask(__name__)
    lock = threading.Lock()
    scheduler = ManualScheduler()
    haptics: list = []
    compositor = Compositor(Raster(width, height), params=params, scheduler=scheduler, haptic=haptics.append)
    compositor.mount()
    app.config["COMPOSITOR"] = compositor
    app.config["SCHEDULER"] = scheduler

    @app.route("/")
    def index():
        return render_template_string(HTML_TEMPLATE, width=width, height=height, hit_radius=HIT_RADIUS)

    @app.route("/frame.png")
    def frame():
        t = request.args.get("t", type=float)
        theme = Theme.coerce(request.args.get("theme", "light"))
        with lock:
            if t is not None:
                scheduler.fire(t)
            buf = compositor.render(theme)
        return send_file(io.BytesIO(encode_png(buf)), mimetype="image/png")

    @app.route("/params", methods=["GET"])
    def get_params():
        with lock:
            return jsonify({"success": True, "params": compositor.params.to_mapping()})

    @app.route("/params", methods=["POST"])
    def set_params():
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return jsonify({"success": False, "error": "expected a JSON object"}), 400
        with lock:
            compositor.update_parameters(data)
            return jsonify({"success": True, "params": compositor.params.to_mapping()})

    @app.route("/pointer", methods=["POST"])
    def pointer():
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return jsonify({"success": False, "error": "expected a JSON object"}), 400
        kind = data.get("type")
        touch = bool(data.get("touch", False))
        try:
            x = float(data.get("x", 0.0))
            y = float(data.get("y", 0.0))
        except (TypeError, ValueError) as e:
            return jsonify({"success": False, "error": str(e)}), 400
        with lock:
            haptics.clear()
            if kind == "press":
                result = compositor.pointer_press(x, y, touch=touch)
            elif kind == "move":
                result = compositor.pointer_move(x, y, touch=touch)
            elif kind == "release":
                result = compositor.pointer_release()
            elif kind == "leave":
                result = compositor.pointer_leave()
            else:
                return jsonify({"success": False, "error": f"unknown pointer event {kind!r}"}), 400
            state = compositor.interaction.state
            return jsonify({
                "success": True,
                "changed": result.changed,
                "suppressDefault": result.suppress_default,
                "haptic": haptics[0] if haptics else None,
                "dragged": state.dragged,
                "hovered": state.hovered,
                "poles": [[p.x, p.y] for p in compositor.poles],
            })

    @app.route("/status")
    def status():
        with lock:
            return jsonify({
                "status": compositor.status(),
                "pattern": compositor.pattern_status(),
                "mode": compositor.mode.value,
                "poles": [[p.x, p.y] for p in compositor.poles],
            })

    return app


def serve(width: int = 512, height: int = 512, port: int = 5000, open_browser: bool = True,
          params: ControlParameters | None = None) -> None:
    app = create_app(width, height, params)
    url = f"http://localhost:{port}"
    print(f"[OK] polefield serving on {url}", file=sys.stderr, flush=True)
    if open_browser:
        Timer(1.5, lambda: webbrowser.open(url)).start()
    app.run(debug=False, port=port, threaded=True)
