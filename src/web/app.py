"""
FastAPI Web Application - Absolute Learner Webhook
===================================================

Twilio posts every inbound WhatsApp message to /webhook. The message is
validated, acknowledged immediately, and processed in the background so
the channel never waits on the LLM or the reply delivery.
"""

import logging
from typing import List, Optional
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, BackgroundTasks
from fastapi.responses import Response
from pydantic import BaseModel

from src.application import LearningOrchestrator, build_orchestrator, parse_inbound
from src.domain import TOPIC_CATALOG, MalformedRequestError, normalize_phone
from src.infrastructure.config import get_settings
from src.infrastructure.persistence import Database, init_database

logger = logging.getLogger(__name__)

# ── Globals ────────────────────────────────────────────────────────
db: Optional[Database] = None
orchestrator: Optional[LearningOrchestrator] = None

# Empty TwiML: acknowledge without an inline reply (replies go out via the API)
EMPTY_TWIML = '<?xml version="1.0" encoding="UTF-8"?><Response></Response>'


class LearnerResponse(BaseModel):
    phone: str
    name: str = ""
    last_topic: Optional[str] = None
    history: List[str] = []
    created_at: str = ""


class StatsResponse(BaseModel):
    learners: int
    topics: int


# ── Lifespan ───────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    global db, orchestrator
    settings = get_settings()
    for issue in settings.validate():
        logger.warning(issue)

    if db is None:
        db = init_database(settings.database.path, timeout=settings.database.timeout_seconds)
    if orchestrator is None:
        orchestrator = build_orchestrator(settings, store=db)
    logger.info("🚀 AbsoluteLearner AI ready")
    yield
    orchestrator.close()


app = FastAPI(title="Absolute Learner", description="WhatsApp Daily Learning Bot", lifespan=lifespan)


async def _read_payload(request: Request) -> dict:
    """Accept Twilio's url-encoded form as well as JSON bodies."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            payload = await request.json()
        except ValueError:
            raise MalformedRequestError("Body is not valid UTF-8 JSON")
        if not isinstance(payload, dict):
            raise MalformedRequestError("JSON body must be an object")
        return payload

    form = await request.form()
    return dict(form)


# ── Webhook ────────────────────────────────────────────────────────

@app.post("/webhook")
async def webhook(request: Request, background_tasks: BackgroundTasks):
    """Inbound WhatsApp message. 400 when malformed, 200 once accepted."""
    if orchestrator is None:
        raise HTTPException(status_code=503, detail="Service not ready")

    try:
        message = parse_inbound(await _read_payload(request))
    except MalformedRequestError as e:
        logger.warning(f"Rejected webhook call: {e}")
        raise HTTPException(status_code=400, detail=str(e))

    logger.info(f"Message from {message.phone}: {message.text[:50]}")
    background_tasks.add_task(orchestrator.handle, message)
    return Response(content=EMPTY_TWIML, media_type="application/xml")


# ── API Endpoints ──────────────────────────────────────────────────

@app.get("/health")
async def health():
    return {"ok": True, "service": "absolute-learner"}


@app.get("/api/learners/{phone}", response_model=LearnerResponse)
async def api_get_learner(phone: str):
    if db is None:
        raise HTTPException(status_code=503, detail="Service not ready")

    profile = db.find_by_phone(normalize_phone(phone))
    if not profile:
        raise HTTPException(status_code=404, detail="Learner not found")
    return LearnerResponse(**profile.to_dict())


@app.get("/api/stats", response_model=StatsResponse)
async def api_stats():
    if db is None:
        raise HTTPException(status_code=503, detail="Service not ready")
    return StatsResponse(learners=db.count(), topics=len(TOPIC_CATALOG))
