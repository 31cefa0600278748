"""HTTP and WebSocket routes."""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Depends, Query, Request, WebSocket, WebSocketDisconnect
from fastapi.responses import JSONResponse

from ofertasya.errors import MalformedPayloadError
from ofertasya.offers.service import IngestionService
from ofertasya.outbound.broadcast import WebSocketBroadcaster

logger = structlog.get_logger()

SERVICE_NAME = "Ofertas YA Backend"
MAX_LIST_LIMIT = 200

router = APIRouter()
api_router = APIRouter(prefix="/api")


def get_service(request: Request) -> IngestionService:
    return request.app.state.service


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"status": "error", "message": message})


@router.get("/")
async def root() -> dict[str, str]:
    """Liveness check."""
    return {"status": "ok", "service": SERVICE_NAME}


@router.websocket("/ws")
async def offers_socket(websocket: WebSocket) -> None:
    """Subscribe a dashboard client to new offer events."""
    broadcaster: WebSocketBroadcaster = websocket.app.state.broadcaster
    await broadcaster.connect(websocket)
    try:
        while True:
            # Clients only listen; drain anything they send to detect disconnects.
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        broadcaster.disconnect(websocket)


@api_router.post("/ingest/webhook")
async def ingest_webhook(request: Request, service: IngestionService = Depends(get_service)) -> Any:
    """Ingest one offer pushed by an external system."""
    try:
        body = await request.json()
    except ValueError:
        return _error(422, "Request body must be valid JSON")

    try:
        offer = await service.ingest_payload(body)
    except MalformedPayloadError as e:
        return _error(422, str(e))
    except Exception as e:
        logger.exception("Webhook ingest failed")
        return _error(500, str(e))

    return {"status": "success", "data": offer.to_wire()}


@api_router.get("/offers")
def list_offers(
    request: Request,
    limit: int | None = Query(None, ge=1, le=MAX_LIST_LIMIT),
    service: IngestionService = Depends(get_service),
) -> list[dict[str, Any]]:
    """Most recently detected offers, newest first."""
    if limit is None:
        limit = request.app.state.settings.recent_offers_limit
    return [offer.to_wire() for offer in service.list_recent(limit)]
