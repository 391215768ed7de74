"""
API Routes for Travel Planner.
A single action endpoint; the dispatcher decides what each action does.
"""
import logging
from typing import AsyncIterator

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response, StreamingResponse

from ..models.action import ActionName, ActionRequest
from ..services.dispatcher import ActionDispatcher

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["travel-planner"])

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def get_dispatcher(request: Request) -> ActionDispatcher:
    """The dispatcher built at startup."""
    return request.app.state.dispatcher


async def relay_chunks(chunks: AsyncIterator[str]) -> AsyncIterator[str]:
    """
    Write upstream chunks through in arrival order.

    A failure mid-stream can only end the response: the status line is
    already sent, so it is logged and nothing more is written.
    """
    try:
        async for chunk in chunks:
            yield chunk
    except Exception as e:
        logger.error(f"Upstream stream failed mid-response, closing connection: {e}")
    finally:
        await chunks.aclose()


@router.options("/travel")
async def travel_options():
    """CORS preflight."""
    return Response(status_code=200, headers=CORS_HEADERS)


@router.post("/travel")
async def travel_action(
    request: ActionRequest,
    dispatcher: ActionDispatcher = Depends(get_dispatcher),
):
    """Run an action; generatePlan with stream=true answers with raw text chunks."""
    streaming = request.stream and request.action == ActionName.GENERATE_PLAN.value
    result = await dispatcher.dispatch(request.action, request.payload, streaming)

    if result.stream:
        return StreamingResponse(
            relay_chunks(result.body),
            status_code=result.status,
            media_type="text/plain; charset=utf-8",
        )
    return JSONResponse(status_code=result.status, content=result.body)


@router.api_route("/travel", methods=["GET", "PUT", "PATCH", "DELETE"])
async def travel_method_not_allowed():
    """Only POST and OPTIONS are served."""
    return JSONResponse(status_code=405, content={"error": "Method Not Allowed"}, headers=CORS_HEADERS)
