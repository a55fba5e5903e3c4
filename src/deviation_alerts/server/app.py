# src/deviation_alerts/server/app.py

# --- Built Ins ---
from collections.abc import AsyncIterator
from typing import Optional

# --- Installed ---
import aiohttp
import orjson
from aiohttp import web
from loguru import logger as log

# --- Local Application Imports ---
from ..config.models import AppSettings
from ..core.models import SymbolSet
from ..exchanges.public.gemini import GeminiPublicClient
from ..pipeline.orchestrator import AlertPipeline
from ..pipeline.scheduler import BatchScheduler
from ..utils.resource_manager import managed_resources

PIPELINE_KEY = web.AppKey("pipeline", AlertPipeline)


def json_response(body, status: int = 200) -> web.Response:
    return web.Response(body=orjson.dumps(body), status=status, content_type="application/json")


async def handle_alert_request(request: web.Request) -> web.Response:
    """Entry point for every inbound request; any path is treated as the alert endpoint."""
    log.info(f"{request.method}  {request.path_qs}")
    pipeline = request.app[PIPELINE_KEY]
    status, body = await pipeline.handle(request.method, request.query)
    return json_response(body, status=status)


async def build_pipeline(
    settings: AppSettings, http_session: aiohttp.ClientSession
) -> tuple[AlertPipeline, GeminiPublicClient]:
    """
    Loads the symbol directory and wires the request pipeline.

    Raises:
        StartupError: if the symbol directory cannot be loaded.
    """
    client = GeminiPublicClient(settings.exchange, http_session)
    symbol_set = SymbolSet(symbols=await client.get_symbols())
    scheduler = BatchScheduler(settings.pacing)
    return AlertPipeline(symbol_set, client, scheduler), client


def create_app(settings: AppSettings, pipeline: Optional[AlertPipeline] = None) -> web.Application:
    """
    Builds the aiohttp application.

    With no pipeline given, a startup hook opens the shared HTTP session,
    loads the symbol set and builds one; the session is closed on shutdown.
    A pre-built pipeline skips the startup phase entirely.
    """
    app = web.Application()
    app.router.add_route("*", "/{tail:.*}", handle_alert_request)

    if pipeline is not None:
        app[PIPELINE_KEY] = pipeline
        return app

    async def pipeline_context(app: web.Application) -> AsyncIterator[None]:
        http_session = aiohttp.ClientSession()
        async with managed_resources([http_session]):
            app[PIPELINE_KEY], client = await build_pipeline(settings, http_session)
            async with managed_resources([client]):
                yield

    app.cleanup_ctx.append(pipeline_context)
    return app
