"""HTTP route definitions for the service."""

from __future__ import annotations

from fastapi import APIRouter, status

from app.routes import auth, batches, billing, clients, dashboard, employees, oil, pressing

router = APIRouter()
api_router = APIRouter(prefix="/api")

api_router.include_router(auth.router)
api_router.include_router(clients.router)
api_router.include_router(batches.router)
api_router.include_router(batches.decisions_router)
api_router.include_router(pressing.rooms_router)
api_router.include_router(pressing.sessions_router)
api_router.include_router(oil.oil_batches_router)
api_router.include_router(oil.quality_router)
api_router.include_router(oil.containers_router)
api_router.include_router(billing.prices_router)
api_router.include_router(billing.invoices_router)
api_router.include_router(billing.payments_router)
api_router.include_router(employees.router)
api_router.include_router(dashboard.router)


@api_router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "Olive mill API; see /api/health for service status."}


router.include_router(api_router)
