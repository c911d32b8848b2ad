"""the beautiful world start from here."""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

from keybase_notify.routers import gh

app = FastAPI(title="GitHub → Keybase notifications")

app.include_router(gh.router)


@app.get("/", response_class=PlainTextResponse)
def root():
    """
    Simple liveness endpoint.
    """
    return "Hello World!"
