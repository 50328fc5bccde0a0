"""Single-page app — a built frontend with client-side routes.

Serves ``dist/`` next to this file with the stock chain (security
headers, gzip, SPA fallback) plus one custom middleware that stamps
each response with the time spent producing it.

Deep links such as ``/projects/42`` return ``index.html`` and the
frontend router takes it from there; hashed files under ``/assets/``
are cached for a year.

Run:
    python app.py
"""

import time
from pathlib import Path

from spaserve import App, ServerConfig

DIST_DIR = Path(__file__).parent / "dist"

app = App(ServerConfig(asset_dir=DIST_DIR))


async def server_timing(request, next):
    start = time.perf_counter()
    response = await next(request)
    elapsed_ms = (time.perf_counter() - start) * 1000
    return response.with_header("Server-Timing", f"app;dur={elapsed_ms:.1f}")


app.add_middleware(server_timing)


if __name__ == "__main__":
    app.run()
