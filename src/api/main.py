"""FastAPI app: coffee maker hardware control, user actions, WebSocket state streaming."""

import logging
import asyncio
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hardware import CoffeeMakerController, HardwareModel

from . import routes, websocket

logger = logging.getLogger(__name__)


async def control_loop(app: FastAPI):
    """Continuous control loop driving the coffee maker controller."""
    controller = app.state.controller

    while app.state.running:
        try:
            controller.poll()
            await asyncio.sleep(controller.poll_interval)
        except asyncio.CancelledError:
            break
        except Exception as e:
            logger.error(f"Control loop error: {e}")
            await asyncio.sleep(1)


def create_app(hardware: Optional[HardwareModel] = None, run_controller: bool = True,
               poll_interval: float = 0.2, tick_interval: float = 1.0,
               stream_interval: float = 1.0) -> FastAPI:
    """Build the API around a hardware model (a fresh one unless given)."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup and shutdown lifecycle."""
        logger.info("=" * 60)
        logger.info("COFFEE MAKER SIMULATOR - STARTING")
        logger.info("=" * 60)

        app.state.hardware.reset()
        app.state.running = True
        tasks = [asyncio.create_task(websocket.broadcast_state(app, stream_interval))]
        if run_controller:
            tasks.append(asyncio.create_task(control_loop(app)))
            logger.info("✓ Controller loop started")

        logger.info("✓ System startup complete")

        yield  # Application running

        logger.info("Shutting down...")
        app.state.running = False
        for task in tasks:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        app.state.hardware.cleanup()
        logger.info("✓ Shutdown complete")

    app = FastAPI(
        title="Coffee Maker Simulator",
        description="Simulated coffee maker hardware with a timed brew cycle",
        version="1.0.0",
        lifespan=lifespan
    )

    app.state.hardware = hardware or HardwareModel(tick_interval=tick_interval)
    app.state.controller = CoffeeMakerController(app.state.hardware, poll_interval=poll_interval)
    app.state.connections = websocket.ConnectionManager()
    app.state.running = False

    # CORS middleware (allow dashboard access from any origin)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"]
    )

    app.include_router(routes.router, prefix="/api")
    app.include_router(websocket.router)

    @app.get("/")
    async def root():
        return {"name": app.title, "version": app.version, "docs": "/docs"}

    return app
