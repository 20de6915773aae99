"""FastAPI Mount Target — routers, version fallbacks and static folders on a FastAPI app.

Invariants:
    - include() accepts only APIRouter instances (anything else raises TypeError)
    - A fallback route matches its prefix only; it rewrites the path to the previous
      version's prefix and dispatches through the app router exactly once
    - A re-dispatched request never matches another fallback (single hop)
    - A static folder route matches only GET/HEAD requests for existing regular files,
      so unmatched paths fall through to later routes
"""

import logging
import stat
from pathlib import Path
from typing import Any

from fastapi import APIRouter, FastAPI
from starlette.routing import BaseRoute, Match, NoMatchFound
from starlette.staticfiles import StaticFiles
from starlette.types import ASGIApp, Receive, Scope, Send

logger = logging.getLogger(__name__)

FALLBACK_SCOPE_KEY = "endurance.fallback_from"


class FallbackRoute(BaseRoute):
    """Rewrites `/v{n}{base}/*` to `/v{n-1}{base}/*` when nothing under `/v{n}` matched."""

    def __init__(self, prefix: str, target_prefix: str, dispatch: ASGIApp):
        self.prefix = prefix
        self.target_prefix = target_prefix
        self.dispatch = dispatch

    def matches(self, scope: Scope) -> tuple[Match, Scope]:
        if scope["type"] not in ("http", "websocket") or FALLBACK_SCOPE_KEY in scope:
            return Match.NONE, {}
        path = scope["path"]
        if path == self.prefix or path.startswith(self.prefix + "/"):
            return Match.FULL, {}
        return Match.NONE, {}

    async def handle(self, scope: Scope, receive: Receive, send: Send) -> None:
        rewritten = self.target_prefix + scope["path"][len(self.prefix):]
        logger.debug(f"Fallback {scope['path']} -> {rewritten}")
        child = dict(scope)
        child["path"] = rewritten
        child["raw_path"] = rewritten.encode()
        child[FALLBACK_SCOPE_KEY] = self.prefix
        await self.dispatch(child, receive, send)

    def url_path_for(self, name: str, /, **path_params: Any):
        raise NoMatchFound(name, path_params)

    def __repr__(self) -> str:
        return f"FallbackRoute({self.prefix!r} -> {self.target_prefix!r})"


class StaticFolderRoute(BaseRoute):
    """Serves files of a module's `public` folder at the application root."""

    def __init__(self, directory: Path):
        self.directory = directory
        self.files = StaticFiles(directory=directory)

    def matches(self, scope: Scope) -> tuple[Match, Scope]:
        if scope["type"] != "http" or scope.get("method") not in ("GET", "HEAD"):
            return Match.NONE, {}
        relative = self.files.get_path(scope)
        if relative in ("", "."):
            return Match.NONE, {}
        _, stat_result = self.files.lookup_path(relative)
        if stat_result is not None and stat.S_ISREG(stat_result.st_mode):
            return Match.FULL, {}
        return Match.NONE, {}

    async def handle(self, scope: Scope, receive: Receive, send: Send) -> None:
        await self.files(scope, receive, send)

    def url_path_for(self, name: str, /, **path_params: Any):
        raise NoMatchFound(name, path_params)

    def __repr__(self) -> str:
        return f"StaticFolderRoute({str(self.directory)!r})"


class FastAPIMountTarget:
    """MountTarget backed by a FastAPI application."""

    def __init__(self, app: FastAPI):
        self.app = app

    def include(self, path: str, router: Any) -> None:
        if not isinstance(router, APIRouter):
            raise TypeError(
                f"Expected an APIRouter for {path}, got {type(router).__name__}",
            )
        self.app.include_router(router, prefix=path)

    def add_fallback(self, path: str, previous_path: str) -> None:
        self.app.router.routes.append(FallbackRoute(path, previous_path, self.app.router))

    def serve_static(self, folder: Path) -> None:
        logger.info(f"Serving static files from {folder}")
        self.app.router.routes.append(StaticFolderRoute(folder))
