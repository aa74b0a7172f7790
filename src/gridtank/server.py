"""
HTTP front end for the bot.

GET / answers a readiness check; any other method on / carries one ArenaUpdate
as JSON and gets back a single action character.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request, Response
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from .arena import ArenaUpdate
from .engine import Bot

log = logging.getLogger("gridtank.server")

GREETING = "Let the battle begin!"
# Every method except GET carries a snapshot; HEAD has no body to answer with.
DECISION_METHODS = ("POST", "PUT", "PATCH", "DELETE", "OPTIONS")


def create_app(bot: Optional[Bot] = None) -> FastAPI:
    bot = bot or Bot()
    app = FastAPI(title="gridtank", description="Grid tank battle bot", version="0.1.0")
    app.state.bot = bot

    @app.get("/", response_class=PlainTextResponse)
    async def root() -> str:
        return GREETING

    @app.api_route("/", methods=list(DECISION_METHODS), response_class=PlainTextResponse)
    async def play(request: Request) -> Response:
        body = await request.body()
        try:
            update = ArenaUpdate.model_validate_json(body)
        except ValidationError as exc:
            log.warning("Failed to decode ArenaUpdate in request body: %s", exc)
            return Response(status_code=500)
        log.debug("IN: %s", update.to_wire())
        action = await run_in_threadpool(bot.play, update)
        return PlainTextResponse(action)

    return app
