from fastapi import APIRouter, HTTPException, Request, status
from fastapi.responses import JSONResponse
import logging

router = APIRouter(tags=["interactions"])


@router.post("/interactions")
async def interactions_endpoint(request: Request):
    # Подпись уже проверена в DiscordSignatureMiddleware
    try:
        body = await request.json()
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid JSON")
    if not isinstance(body, dict):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid interaction")

    dispatcher = request.app.state.dispatcher
    payload = await dispatcher.dispatch(body)
    logging.debug(f"Ответ на взаимодействие типа {body.get('type')}: {payload.get('type')}")
    return JSONResponse(payload)
