"""Endurance Application — builds a FastAPI app from discovered modules.

Invariants:
    - setup() runs once: registry → walk → middleware phase → content phase → route mounting
      → system routes → API docs → APP_STARTED
    - No discovery error aborts setup(); failures are logged and the unit is skipped
    - CORS configured from settings (disabled when CORS_ORIGIN is empty)
    - Every response passes the access log and gzip compression (bodies >= GZIP_MINIMUM_SIZE)
    - The route table is frozen once setup() returns

Design Decisions:
    - setup() is awaited before the server starts accepting requests:
      middleware units may call app.add_middleware, which Starlette forbids once serving
    - Server runs in the same event loop as setup() (uvicorn.Server.serve)
"""

import asyncio
import logging

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from endurance.api.error_handlers import register_error_handlers
from endurance.api.routes.system import create_system_router
from endurance.config import Settings, get_settings
from endurance.infrastructure.api_docs import ApiDocs, load_definition
from endurance.infrastructure.emitter import EventEmitter, EventType
from endurance.infrastructure.mount_target import FastAPIMountTarget
from endurance.infrastructure.observability import install_access_log, setup_logging
from endurance.services.module_registry import discover_modules, local_project_root
from endurance.services.phased_loader import DiscoveryResult, discover
from endurance.services.route_mounter import MountReport, RouteMounter
from endurance.services.unit_loader import PythonUnitLoader, UnitContext, UnitLoader

logger = logging.getLogger(__name__)


class EnduranceApp:
    def __init__(
        self,
        settings: Settings | None = None,
        loader: UnitLoader | None = None,
        emitter: EventEmitter | None = None,
    ):
        self.settings = settings or get_settings()
        self.emitter = emitter or EventEmitter()
        self.app = FastAPI(
            title="Endurance API", docs_url=None, redoc_url=None, openapi_url=None,
        )
        self.app.state.endurance = self
        self.target = FastAPIMountTarget(self.app)
        self.loader = loader or PythonUnitLoader(
            UnitContext(app=self.app, emitter=self.emitter, settings=self.settings),
        )
        self.discovery: DiscoveryResult | None = None
        self.report: MountReport | None = None
        self.docs: ApiDocs | None = None

        install_access_log(self.app)
        self.app.add_middleware(GZipMiddleware, minimum_size=self.settings.gzip_minimum_size)
        self._setup_cors()
        register_error_handlers(self.app)

    def _setup_cors(self) -> None:
        origins = self.settings.cors_origins
        if not origins:
            return
        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            allow_headers=["Content-Type", "Authorization"],
            allow_credentials=True,
        )

    async def setup(self) -> FastAPI:
        """Discover, load and mount everything; safe to await more than once."""
        if self.report is not None:
            return self.app
        settings = self.settings

        modules = discover_modules(
            settings.dependency_path,
            settings.local_modules_path,
            prefix=settings.module_prefix,
            namespace_prefix=settings.namespace_prefix,
            build_subdir=settings.build_subdir,
        )
        local_root = local_project_root(settings.project_root, settings.build_subdir)
        self.discovery = await discover(modules, local_root, self.loader, self.target)
        await self.emitter.emit(EventType.MODULES_LOADED, {
            "modules": [module.name for module in modules],
            "loaded": len(self.discovery.loaded),
            "failed": len(self.discovery.failed),
        })

        self.report = await RouteMounter(self.loader, self.target).mount_all(
            self.discovery.version_table, self.discovery.barrier,
        )
        await self.emitter.emit(EventType.ROUTES_MOUNTED, {"routes": self.report.mount_paths})

        self.app.include_router(
            create_system_router(self.report.mount_paths, not settings.is_production),
        )
        if settings.swagger:
            self.docs = ApiDocs(
                self.app,
                load_definition(settings.project_root / settings.swagger_config_file),
            )
            self.docs.generate(self.report.route_files)
            self.docs.setup()

        logger.info(
            f"Endurance ready: {len(modules)} modules, "
            f"{len(self.report.mounted)} routes mounted, {len(self.report.failed)} failed",
        )
        await self.emitter.emit(EventType.APP_STARTED, {
            "host": settings.host, "port": settings.server_port,
        })
        return self.app

    async def serve(self) -> None:
        await self.setup()
        config = uvicorn.Config(
            self.app,
            host=self.settings.host,
            port=self.settings.server_port,
            log_config=None,
        )
        logger.info(f"Server listening on {self.settings.host}:{self.settings.server_port}")
        await uvicorn.Server(config).serve()

    def run(self) -> None:
        setup_logging(self.settings.log_level, self.settings.log_format)
        asyncio.run(self.serve())


def main() -> None:
    EnduranceApp().run()
