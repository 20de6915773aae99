"""System Routes — favicon, health check and the development error trigger.

Invariants:
    - GET /favicon.ico always answers 204 when no module serves one
    - GET /api/v1/health returns 200 with the mounted route paths once startup finished
    - GET /cause-error exists only outside production
"""

from fastapi import APIRouter, Response, status
from fastapi.responses import JSONResponse


def create_system_router(mount_paths: list[str], include_debug: bool) -> APIRouter:
    router = APIRouter(tags=["system"])

    @router.get("/favicon.ico", include_in_schema=False)
    async def favicon():
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @router.get("/api/v1/health", status_code=status.HTTP_200_OK)
    async def health_check():
        """Liveness check. Returns 200 if the process is up."""
        return {"status": "healthy", "routes": list(mount_paths)}

    if include_debug:
        @router.get("/cause-error", include_in_schema=False)
        async def cause_error():
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"message": "Intentional error"},
            )

    return router
