#!/usr/bin/env python3
"""HTTP service for the spot trade journal.

Loads the account's spot executions from Bybit (or takes them from the
request body), reconstructs FIFO round-trip trades and returns them
newest-first together with summary statistics.
"""

import logging
import os
from typing import Any

import requests
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from spot_journal.data import BybitAPIError, BybitExecutionClient
from spot_journal.matching import calculate_trade_stats, reconstruct_trades
from spot_journal.schemas import BybitRequest, JournalResponse, MatchRequest, TradeOut, TradeSummary

# Configuration from environment
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
PORT = int(os.environ.get("PORT", 8080))

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Spot Trade Journal Service")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def build_journal(records: list[Any]) -> JournalResponse | JSONResponse:
    """Match raw execution records into a journal response."""
    result = reconstruct_trades(records)
    if result.status == "error":
        return _error(422, result.error or "Invalid executions")

    logger.info(f"Reconstructed {len(result.trades)} trades from {len(records)} executions")
    return JournalResponse(
        trades=[TradeOut.from_trade(t) for t in result.trades],
        summary=TradeSummary.from_stats(calculate_trade_stats(result.trades)),
    )


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


@app.post("/api/bybit", response_model=JournalResponse)
def load_bybit_trades(request: BybitRequest):
    """Load spot executions from Bybit and return the reconstructed trades."""
    api_key = (request.api_key or "").strip()
    api_secret = (request.api_secret or "").strip()
    if not api_key or not api_secret:
        return _error(400, "apiKey and apiSecret are required")

    try:
        client = BybitExecutionClient(api_key, api_secret)
        records = client.fetch_all_executions()
        return build_journal(records)
    except BybitAPIError as e:
        logger.warning(f"Bybit rejected execution request (retCode={e.ret_code}): {e}")
        return _error(502, str(e))
    except requests.RequestException as e:
        logger.error(f"Bybit request failed: {e}", exc_info=True)
        return _error(502, f"Bybit request failed: {e}")
    except Exception as e:
        logger.error(f"Loading Bybit trades failed: {e}", exc_info=True)
        return _error(500, str(e) or "Internal server error")


@app.post("/api/match", response_model=JournalResponse)
def match_trades(request: MatchRequest):
    """Reconstruct trades from executions supplied in the request body."""
    try:
        return build_journal(request.executions)
    except Exception as e:
        logger.error(f"Matching failed: {e}", exc_info=True)
        return _error(500, str(e) or "Internal server error")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=PORT)
