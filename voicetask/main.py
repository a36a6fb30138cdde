from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from voicetask.api.routers import billing, cron, plans, webhooks, workspaces
from voicetask.shared.config import get_settings


logging.basicConfig(
    level=get_settings().log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="VoiceTask Billing API")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(webhooks.router)
app.include_router(plans.router)
app.include_router(workspaces.router)
app.include_router(billing.router)
app.include_router(cron.router)


@app.get("/health")
def health():
    return {"status": "ok"}
