"""Local preview server for Inkwell.

``inkwell serve`` builds the blog once, serves the output directory over
HTTP and rebuilds in place whenever a file under the blog directory changes.
Directory listings are never exposed: a directory without ``index.html`` or a
missing path answers 404 with the site's own ``404.html`` when there is one.

Key classes:
- PreviewServer: Builds, serves and rebuilds the site.
- _PreviewHandler: Request handler with 404 pages and no caching.
- _ChangeHandler: Watchdog handler that asks the server to rebuild.
"""

from __future__ import annotations

import functools
import logging
import threading
import time
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Callable

import click
from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from .build import build_site
from .errors import BuildError

logger = logging.getLogger(__name__)

DEFAULT_PORT = 3000
REBUILD_DEBOUNCE = 0.2


def snapshot_sources(root: Path, skip: Callable[[Path], bool] = lambda path: False) -> frozenset:
    """Fingerprint every file below ``root`` as ``(relative path, mtime_ns, size)``.

    Hidden files and anything ``skip`` rejects are left out, so editor swap
    files and the build output never count as source changes.
    """
    entries = set()
    for path in root.rglob("*"):
        rel = path.relative_to(root)
        if any(part.startswith(".") for part in rel.parts) or skip(path):
            continue
        try:
            stat = path.stat()
        except OSError:
            continue
        if path.is_file():
            entries.add((rel.as_posix(), stat.st_mtime_ns, stat.st_size))
    return frozenset(entries)


class _PreviewHandler(SimpleHTTPRequestHandler):
    def end_headers(self):
        self.send_header("Cache-Control", "no-cache, no-store, must-revalidate")
        super().end_headers()

    def list_directory(self, path):  # pragma: no cover - send_head answers first
        return self._not_found()

    def log_message(self, format, *args):
        logger.debug("%s %s", self.address_string(), format % args)

    def _not_found(self):
        page = Path(self.directory) / "404.html"
        if not page.is_file():
            self.send_error(404, "File not found")
            return None
        body = page.read_bytes()
        self.send_response(404)
        self.send_header("Content-Type", "text/html; charset=utf-8")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)
        return None

    def send_head(self):
        target = Path(self.translate_path(self.path))
        if target.is_dir():
            target = target / "index.html"
        if not target.is_file():
            return self._not_found()
        return super().send_head()


class PreviewServer:
    """Builds the site, serves it and rebuilds on change.

    Attributes:
        config_path: Configuration file of the blog.
        output_dir: Directory that is built and served.
        port: HTTP port.
        watch_dir: Directory watched for changes (the config file's directory).
        debounce: Minimum seconds between two rebuilds.
    """

    def __init__(self, config_path: Path, output_dir: Path, port: int = DEFAULT_PORT):
        self.config_path = Path(config_path).resolve()
        self.output_dir = Path(output_dir).resolve()
        self.port = port
        self.watch_dir = self.config_path.parent
        self.debounce = REBUILD_DEBOUNCE
        self._observer: Observer | None = None
        self._httpd: ThreadingHTTPServer | None = None
        self._building = threading.Lock()
        self._last_attempt = 0.0
        self._snapshot: frozenset | None = None

    def start(self) -> None:  # pragma: no cover - blocks until interrupted
        self.build()
        self._snapshot = self.snapshot()
        self._httpd = self.make_server()
        threading.Thread(target=self._httpd.serve_forever, daemon=True).start()
        click.echo(f"Serving {self.output_dir} at http://localhost:{self.port}")
        self._start_watcher()
        click.echo(f"Watching {self.watch_dir} for changes (Ctrl+C to stop)")
        try:
            while True:
                time.sleep(1)
        except KeyboardInterrupt:
            click.echo("Stopping preview server")
        finally:
            self.stop()

    def stop(self) -> None:
        if self._observer is not None:
            self._observer.stop()
            self._observer.join()
            self._observer = None
        if self._httpd is not None:
            self._httpd.shutdown()
            self._httpd.server_close()
            self._httpd = None

    def build(self) -> bool:
        """Build the site; False when the build failed or a core page type failed."""
        try:
            result = build_site(self.config_path, self.output_dir)
        except BuildError as exc:
            logger.error("Build failed: %s", exc)
            return False
        logger.info("Built %d files into %s", len(result.written), result.output_dir)
        return result.succeeded

    def make_server(self) -> ThreadingHTTPServer:
        handler = functools.partial(_PreviewHandler, directory=str(self.output_dir))
        return ThreadingHTTPServer(("", self.port), handler)

    def _start_watcher(self) -> None:
        observer = Observer()
        observer.schedule(_ChangeHandler(self), str(self.watch_dir), recursive=True)
        observer.start()
        self._observer = observer

    def is_ignored(self, path: Path) -> bool:
        """True for paths inside the output directory."""
        return path.resolve().is_relative_to(self.output_dir)

    def snapshot(self) -> frozenset:
        return snapshot_sources(self.watch_dir, self.is_ignored)

    def rebuild(self) -> None:
        """Rebuild unless one is running, one ran moments ago, or no source changed."""
        if time.monotonic() - self._last_attempt < self.debounce:
            return
        if not self._building.acquire(blocking=False):
            return
        try:
            current = self.snapshot()
            if current == self._snapshot:
                return
            click.echo("Change detected; rebuilding...")
            self.build()
            self._snapshot = current
        finally:
            self._last_attempt = time.monotonic()
            self._building.release()


class _ChangeHandler(FileSystemEventHandler):
    def __init__(self, server: PreviewServer):
        super().__init__()
        self.server = server

    def on_any_event(self, event):
        if event.is_directory:
            return
        path = Path(event.src_path)
        if path.name.startswith(".") or self.server.is_ignored(path):
            return
        self.server.rebuild()
