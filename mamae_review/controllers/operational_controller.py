"""
Operational endpoints for load balancers and monitoring
"""

import os
import sys
import time
from datetime import datetime, UTC

import psutil
from fastapi import Request
from fastapi.responses import JSONResponse

from mamae_review.core.config import config
from mamae_review.core.logger import logger
from mamae_review.db.database import db

start_time = time.time()


def _status_body(status: str, **fields) -> dict:
    return {
        "status": status,
        "service": config.service_name,
        "version": config.service_version,
        "timestamp": datetime.now(UTC).isoformat(),
        **fields,
    }


def _store_state() -> dict:
    store = db.store
    return {
        "backend": config.store_backend,
        "connected": store is not None and store.is_connected,
        "live_queries": store.listener_count if store is not None else 0,
    }


def health(request: Request):
    return _status_body("healthy")


def readiness(request: Request):
    """Ready once the document store is connected"""
    store = _store_state()
    if not store["connected"]:
        logger.warning(
            "Readiness check failed: document store not connected",
            metadata={"event": "readiness_failed", "store": store}
        )
        return JSONResponse(status_code=503, content=_status_body("not ready", checks={"store": store}))
    return _status_body("ready", checks={"store": store})


def liveness(request: Request):
    return _status_body("alive", uptime=time.time() - start_time)


def metrics(request: Request):
    """Process metrics plus document store state"""
    process = psutil.Process()
    memory = process.memory_info()
    return _status_body(
        "ok",
        metrics={
            "uptime": time.time() - start_time,
            "memory": {"rss": memory.rss, "vms": memory.vms},
            "cpu_percent": process.cpu_percent(),
            "pid": os.getpid(),
            "python_version": sys.version,
            "store": _store_state(),
        },
    )
