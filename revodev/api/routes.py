"""FastAPI endpoints for the Revodev API.

POST /api/electrical-advice          - general electrical advice (optional image)
POST /api/troubleshooting-advice     - troubleshooting steps + safety precautions
POST /api/accessory-recommendation   - accessory list + justification
POST /api/energy-savings-estimator   - energy-saving suggestions
POST /api/project-planner            - materials, tools and safety for a small project
POST /api/energy-consumption         - kWh / cost calculator (no model)
GET  /api/<capability>               - liveness string
GET  /health                         - component health check
"""

import json
import math

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from revodev.api.schemas import (
    AdviceOutput,
    EnergyConsumptionRequest,
    EnergyConsumptionResponse,
    EnergySavingOutput,
    ProjectPlanOutput,
    RecommendationOutput,
    TroubleshootingOutput,
)
from revodev.core.energy import estimate_consumption
from revodev.flows.capabilities import (
    ADVICE,
    ENERGY,
    PROJECT,
    RECOMMENDATION,
    TROUBLESHOOTING,
    Capability,
)
from revodev.flows.controller import DegradationController

logger = structlog.get_logger(__name__)

router = APIRouter()

OUTCOME_HEADER = "X-Revodev-Outcome"


@router.post("/api/electrical-advice", response_model=AdviceOutput)
async def electrical_advice(req: Request):
    """Answer a general electrical question, optionally about an attached image."""
    return await _dispatch(req, ADVICE)


@router.post("/api/troubleshooting-advice", response_model=TroubleshootingOutput)
async def troubleshooting_advice(req: Request):
    """Suggest troubleshooting steps and safety precautions for a described problem."""
    return await _dispatch(req, TROUBLESHOOTING)


@router.post("/api/accessory-recommendation", response_model=RecommendationOutput)
async def accessory_recommendation(req: Request):
    """Recommend electrical accessories for the described needs."""
    return await _dispatch(req, RECOMMENDATION)


@router.post("/api/energy-savings-estimator", response_model=EnergySavingOutput)
async def energy_savings_estimator(req: Request):
    """Assess appliance usage and suggest energy savings."""
    return await _dispatch(req, ENERGY)


@router.post("/api/project-planner", response_model=ProjectPlanOutput)
async def project_planner(req: Request):
    """Plan a small household electrical project."""
    return await _dispatch(req, PROJECT)


@router.get("/api/electrical-advice", response_class=PlainTextResponse)
@router.get("/api/troubleshooting-advice", response_class=PlainTextResponse)
@router.get("/api/accessory-recommendation", response_class=PlainTextResponse)
@router.get("/api/energy-savings-estimator", response_class=PlainTextResponse)
@router.get("/api/project-planner", response_class=PlainTextResponse)
def capability_liveness(req: Request):
    """Liveness string for smoke tests."""
    name = req.url.path.rsplit("/", 1)[-1]
    return f"Revodev {name} API is running."


@router.post("/api/energy-consumption", response_model=EnergyConsumptionResponse)
def energy_consumption(request: EnergyConsumptionRequest):
    """Estimate consumption and cost for a list of appliances."""
    return estimate_consumption(request)


@router.get("/health")
def health(req: Request):
    """Check health of backend components."""
    controller: DegradationController = req.app.state.controller
    components = {
        "llm": "unconfigured" if controller.degraded else "ok",
        "rate_limiter": "ok",
    }
    status = "degraded" if controller.degraded else "healthy"
    return {
        "status": status,
        "components": components,
        "rate_limited_clients": len(controller.rate_limiter),
    }


@router.get("/")
@router.head("/")
def root_health():
    """Basic root health check for deployment platforms."""
    return {"status": "ok", "service": "revodev-api"}


async def _dispatch(req: Request, capability: Capability) -> JSONResponse:
    """Run a capability through the degradation ladder and build the response."""
    controller: DegradationController = req.app.state.controller
    client_key = client_ip(req)
    payload = await _read_json(req)

    logger.info("api.request", capability=capability.name, client=client_key)

    result = await controller.handle(capability, payload, client_key)

    headers = {OUTCOME_HEADER: result.outcome.value}
    if result.retry_after_ms is not None:
        headers["Retry-After"] = str(max(1, math.ceil(result.retry_after_ms / 1000)))

    return JSONResponse(
        status_code=controller.status_code(result),
        content=result.output.model_dump(mode="json", by_alias=True),
        headers=headers,
    )


async def _read_json(req: Request):
    """Decode the request body; malformed JSON counts as missing input."""
    body = await req.body()
    if not body:
        return {}
    try:
        return json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        logger.info("api.invalid_json", path=req.url.path)
        return {}


def client_ip(req: Request) -> str | None:
    """Client identifier for rate limiting.

    Proxy headers (X-Forwarded-For, then X-Real-IP) are only honoured when the
    app was built with trust_proxy_headers; otherwise any caller could pick
    its own key. Falls back to the socket peer address.
    """
    if getattr(req.app.state, "trust_proxy_headers", False):
        forwarded = req.headers.get("x-forwarded-for")
        if forwarded:
            first = forwarded.split(",")[0].strip()
            if first:
                return first
        real_ip = req.headers.get("x-real-ip")
        if real_ip:
            return real_ip.strip()
    if req.client and req.client.host:
        return req.client.host
    return None
