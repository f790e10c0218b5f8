import os
from pathlib import Path

import reflex as rx

# Keep the frontend build output out of the backend hot-reload watcher; some
# environments (notably WSL2) otherwise reload in a loop.
#
# Reflex reads these as colon-separated absolute paths.
_app_root = Path(__file__).resolve().parent
_default_excludes = [
    _app_root / ".web",
    _app_root / ".react-router",
    _app_root / "dist",
    _app_root / "build",
]
if not os.environ.get("REFLEX_HOT_RELOAD_EXCLUDE_PATHS", ""):
    os.environ["REFLEX_HOT_RELOAD_EXCLUDE_PATHS"] = ":".join(
        str(p) for p in _default_excludes if p.exists()
    )

# Watch the monorepo packages too, so edits under `packages/*` recompile the demo.
_repo_root = _app_root.parent.parent
_default_includes = [
    _repo_root / "packages" / "variation-tree" / "src",
    _repo_root / "packages" / "variation-notation" / "src",
    _repo_root / "packages" / "variation-viewer" / "src",
]
if not os.environ.get("REFLEX_HOT_RELOAD_INCLUDE_PATHS", ""):
    os.environ["REFLEX_HOT_RELOAD_INCLUDE_PATHS"] = ":".join(
        str(p) for p in _default_includes if p.exists()
    )

config = rx.Config(
    app_name="demo_pgn_viewer",
    plugins=[
        rx.plugins.SitemapPlugin(),
        rx.plugins.TailwindV4Plugin(),
    ],
)
