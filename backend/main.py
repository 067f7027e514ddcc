import logging
import os
from typing import Any, Dict, List, Mapping

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from .dcf_engine import DCFComputationError, run_dcf, run_inverse_dcf
from .form_inputs import DEFAULT_FORM, build_valuation_inputs, parse_calculation_mode
from .models import CalculationMode

logger = logging.getLogger(__name__)

ALLOWED_ORIGINS = os.environ.get(
    "ALLOWED_ORIGINS",
    "http://localhost:5173,http://localhost:5174,http://127.0.0.1:5173,http://127.0.0.1:5174",
)


def _parse_origins(raw: str) -> List[str]:
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


app = FastAPI()

# Allow the calculator frontend to call this API
origins = _parse_origins(ALLOWED_ORIGINS)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def calculate_payload(mode: CalculationMode, params: Mapping[str, Any]) -> Dict[str, Any]:
    """Run one calculation and shape it for display; failures become error payloads."""
    inputs = build_valuation_inputs(params)
    try:
        if mode == CalculationMode.INVERSE:
            payload = run_inverse_dcf(inputs).to_dict()
        else:
            payload = run_dcf(inputs).to_dict()
    except DCFComputationError as exc:
        logger.warning("Valuation unavailable (%s): %s", mode.value, exc)
        payload = {
            "error": "valuation_unavailable",
            "message": str(exc),
        }
    except Exception:
        logger.exception("Valuation failed (%s)", mode.value)
        payload = {
            "error": "valuation_failed",
            "message": "The valuation could not be computed for these inputs.",
        }
    payload["mode"] = mode.value
    return payload


@app.get("/")
async def root():
    return {"message": "DCF calculator is running. See /api/dcf and /api/inverse-dcf."}


@app.get("/api/defaults")
async def get_defaults():
    return dict(DEFAULT_FORM)


@app.get("/api/dcf")
async def get_dcf(request: Request):
    return calculate_payload(CalculationMode.DCF, request.query_params)


@app.get("/api/inverse-dcf")
async def get_inverse_dcf(request: Request):
    return calculate_payload(CalculationMode.INVERSE, request.query_params)


@app.get("/api/calculate")
async def calculate(request: Request):
    mode = parse_calculation_mode(request.query_params.get("mode"))
    return calculate_payload(mode, request.query_params)
