from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import Response
from contextlib import asynccontextmanager
import asyncio
import logging
from typing import Optional

from paperpress.config import settings, resolve_log_level, PRINTER_WIDTH
from paperpress.errors import InvalidInput, PaperPressError
from paperpress.layout import layout_blocks, layout_text, print_document
from paperpress.modules import weather
import paperpress.hardware as hardware

logging.basicConfig(
    level=resolve_log_level(settings.log_level),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info(f"Printing to {hardware.printer.name} ({PRINTER_WIDTH} columns)")

    yield

    # Cleanup hardware drivers
    hardware.printer.close()


app = FastAPI(
    title="paperpress",
    description="Prints text and weather forecasts on a receipt printer.",
    version="0.1.0",
    lifespan=lifespan,
)


def _http_error(e: PaperPressError) -> HTTPException:
    return HTTPException(status_code=e.status_code, detail=e.detail)


async def _print_chunks(chunks):
    """Prints on a worker thread; the printer lock is taken there."""
    await asyncio.to_thread(
        print_document, hardware.printer, chunks, hardware.printer_lock
    )


# --- CORE API ---


@app.post("/")
async def print_text(request: Request, raw: bool = False):
    """Prints the request body, word-wrapped unless raw is set."""
    body = await request.body()
    logger.info(f"Received print request: {len(body)} bytes")

    try:
        try:
            text = body.decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidInput("Request body must be UTF-8 text") from e
        logger.debug(f"Content: {text!r}")

        chunks = layout_text(text, raw=raw)
        await _print_chunks(chunks)
    except PaperPressError as e:
        raise _http_error(e) from e

    return Response(status_code=200)


@app.get("/weather")
async def print_weather(location: Optional[str] = None):
    """Prints today's forecast for a place (the configured default if omitted)."""
    try:
        # Network lookups run before, never under, the printer lock
        blocks = await asyncio.to_thread(weather.format_weather_receipt, location)
        chunks = layout_blocks(blocks)
        await _print_chunks(chunks)
    except PaperPressError as e:
        raise _http_error(e) from e

    return Response(status_code=200)


@app.get("/status")
async def status():
    """Which output the service prints to."""
    return {"printer": hardware.printer.name, "width": PRINTER_WIDTH}
