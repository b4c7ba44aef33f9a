"""HTTP server: static files, video metadata lookups and the admin reset."""

from __future__ import annotations

import argparse
import logging
import os
import posixpath
import sqlite3
import uuid
from typing import Callable, Iterable, Optional, Sequence

from dotenv import load_dotenv
from werkzeug.exceptions import HTTPException, NotFound
from werkzeug.routing import Map, Rule
from werkzeug.security import safe_join
from werkzeug.utils import send_from_directory
from werkzeug.wrappers import Request, Response

from .config import Config, ConfigError
from .database import Client
from .responses import cache_middleware, error_response, json_response

logger = logging.getLogger(__name__)


def _serve_file(root: str, subpath: str, environ: dict) -> Response:
    target = safe_join(root, subpath) if subpath else root
    if target is None:
        return NotFound()
    if os.path.isdir(target):
        subpath = posixpath.join(subpath, "index.html") if subpath else "index.html"
    try:
        return send_from_directory(root, subpath, environ)
    except NotFound as exc:
        return exc


def _static_files(root: str, prefix: str) -> Callable:
    def app(environ: dict, start_response: Callable) -> Iterable[bytes]:
        request = Request(environ)
        subpath = request.path[len(prefix):].lstrip("/")
        return _serve_file(root, subpath, environ)(environ, start_response)

    return app


class Server:
    """WSGI application serving the web app, assets and API."""

    def __init__(self, config: Config, db: Client) -> None:
        self.config = config
        self.db = db
        self._app_files = _static_files(config.filepath_root, "/app")
        self._asset_files = cache_middleware(_static_files(config.assets_root, "/assets"))
        self._url_map = Map(
            [
                Rule("/api/videos/<video_id>", methods=["GET"], endpoint=self.handle_video_get),
                Rule("/admin/reset", methods=["POST"], endpoint=self.handle_reset),
            ]
        )

    def __call__(self, environ: dict, start_response: Callable) -> Iterable[bytes]:
        path = environ.get("PATH_INFO", "")
        if path.startswith("/app/"):
            return self._app_files(environ, start_response)
        if path.startswith("/assets/"):
            return self._asset_files(environ, start_response)
        request = Request(environ)
        return self._dispatch(request)(environ, start_response)

    def _dispatch(self, request: Request) -> Callable:
        adapter = self._url_map.bind_to_environ(request.environ)
        try:
            handler, args = adapter.match()
        except HTTPException as exc:
            return exc
        return handler(request, **args)

    def handle_video_get(self, request: Request, video_id: str) -> Response:
        try:
            parsed_id = uuid.UUID(video_id)
        except ValueError as err:
            return error_response(400, "Invalid video ID", err)
        try:
            video = self.db.get_video(parsed_id)
        except sqlite3.Error as err:
            return error_response(404, "Couldn't get video", err)
        if video is None:
            return error_response(404, "Couldn't get video", None)
        return json_response(video, 200)

    def handle_reset(self, request: Request) -> Response:
        if self.config.platform != "dev":
            return Response(
                "Reset is only allowed in dev environment.", status=403, mimetype="text/plain"
            )
        try:
            self.db.reset()
        except sqlite3.Error as err:
            return error_response(500, "Couldn't reset database", err)
        return Response("Database reset to initial state", status=200, mimetype="text/plain")


def _fatal(message: str, *args) -> None:
    logger.critical(message, *args)
    raise SystemExit(1)


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Start the server with settings from the environment and ``.env``."""
    from werkzeug.serving import run_simple

    parser = argparse.ArgumentParser(
        prog="tubestore",
        description="Serve the video storage web app; settings come from the environment.",
    )
    parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")

    load_dotenv(".env")
    try:
        config = Config.from_env()
    except ConfigError as err:
        _fatal("%s", err)

    try:
        port = int(config.port)
    except ValueError:
        _fatal("Invalid PORT: %s", config.port)

    try:
        db = Client(config.db_path)
    except sqlite3.Error as err:
        _fatal("Couldn't connect to database: %s", err)

    try:
        config.ensure_assets_dir()
    except OSError as err:
        db.close()
        _fatal("Couldn't create assets directory: %s", err)

    server = Server(config, db)
    logger.info("Serving on: http://localhost:%s/app/", config.port)
    with db:
        try:
            run_simple("0.0.0.0", port, server, threaded=True)
        except OSError as err:
            _fatal("%s", err)