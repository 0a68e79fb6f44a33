import json
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from medsafe.agent import ResponseGenerator
from medsafe.config import Settings
from medsafe.schemas import ChatRequest, ChatResponse, HealthResponse

CHAT_PATH = "/api/chat"


def create_app(settings: Optional[Settings] = None, transport: Optional[httpx.BaseTransport] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    generator = ResponseGenerator(settings, transport=transport)

    app = FastAPI(title="Medsafe Backend", version="0.1.0")
    app.state.settings = settings
    app.state.generator = generator

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StarletteHTTPException)
    async def method_not_allowed(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 405:
            return JSONResponse(
                status_code=405,
                content={"error": "Method not allowed. Use POST."},
                headers=getattr(exc, "headers", None),
            )
        return await http_exception_handler(request, exc)

    @app.get(CHAT_PATH, response_model=HealthResponse)
    def health():
        return HealthResponse(
            message="Medsafe chat endpoint is running. Send a POST request to chat.",
            has_api_key=settings.has_api_key,
        )

    @app.post(CHAT_PATH, response_model=ChatResponse)
    async def chat(request: Request):
        raw = await request.body()
        try:
            payload = json.loads(raw) if raw else {}
        except ValueError:
            logger.warning("Chat request body is not valid JSON; using an empty request")
            payload = {}

        chat_request = ChatRequest.from_payload(payload)
        reply = await run_in_threadpool(generator.generate, chat_request)
        return ChatResponse(response=reply)

    return app


app = create_app()
