# app/main.py
from dotenv import load_dotenv

load_dotenv()

import logging.config
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from config.appconfig import settings

# Apply logging configuration
logging.config.dictConfig(settings.LOGGING_CONFIG)

# Import routers
from app.dispensing_engine.routes import router as dispensing_router
from config.config_routes import router as config_router

# Import collaborators
from app.database.connection import engine, init_models
from app.dispensing_engine.dispatch_client import DispatchQueue, RobotDispatchClient
from config.dispensingconfig import dispensing_settings


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    if settings.CREATE_TABLES_ON_STARTUP:
        await init_models()

    dispatch_queue = DispatchQueue(
        RobotDispatchClient(dispensing_settings),
        maxsize=dispensing_settings.DISPATCH_QUEUE_SIZE,
        enabled=dispensing_settings.DISPATCH_ENABLED,
    )
    dispatch_queue.start()
    app.state.dispatch_queue = dispatch_queue

    print("\n===============================================================================")
    print(f" 🚀 Starting {settings.APP_NAME}")
    print(f" ✅ Database: {engine.url.render_as_string(hide_password=True)}")
    print(f" ✅ Robot endpoint: {dispensing_settings.robot_url}")
    print(f" ✅ Robot timeout: {dispensing_settings.ROBOT_TIMEOUT_SECONDS}s")
    print(f" ✅ Dispatch queue size: {dispensing_settings.DISPATCH_QUEUE_SIZE}")
    print(f" ✅ Dispatch enabled: {dispensing_settings.DISPATCH_ENABLED}")
    print("===============================================================================\n")
    yield
    # Shutdown
    await dispatch_queue.stop()
    await engine.dispose()
    print("👋 Shutting down")


app = FastAPI(
    title="Medigo Dispensing Backend",
    description="Prescription fulfillment, stock reconciliation and robot dispatch",
    version="1.0.0",
    lifespan=lifespan,
)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies are client errors (400), like clinical validation failures."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors())},
    )


# Include routers with prefixes
app.include_router(dispensing_router, prefix=settings.API_PREFIX, tags=["Prescription Fulfillment"])
app.include_router(config_router, prefix=settings.API_PREFIX)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=True)
