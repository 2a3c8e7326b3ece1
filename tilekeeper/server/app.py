"""
Main server app.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..errors import StorageIOError, StorageUnavailableError
from ..settings import settings
from ..store import store_handle
from .tiles import tiles_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan event handler for the FastAPI app; opens the tile store up front.
    """

    await store_handle.get()

    yield


tags_metadata = [
    {
        "name": "Tiles",
        "description": "Operations to list, retrieve and remove stored tiles, and to view their coverage.",
    },
]

app = FastAPI(lifespan=lifespan, openapi_tags=tags_metadata)

if settings.add_cors:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.exception_handler(StorageUnavailableError)
@app.exception_handler(StorageIOError)
async def storage_error_handler(request: Request, exc: Exception):
    return JSONResponse(status_code=503, content={"detail": str(exc)})


app.include_router(tiles_router)
