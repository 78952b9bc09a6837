"""
Health check endpoints for the credential service
"""
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from datetime import datetime
from typing import Dict, Any

from ..db import Store, get_store
from ..errors import STATUS_ERROR, ServiceUnavailable

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_check() -> Dict[str, Any]:
    """
    Basic health check endpoint.

    Returns:
        dict: Health status and timestamp
    """
    return {
        "status": "healthy",
        "timestamp": datetime.utcnow().isoformat()
    }


@router.get("/ready", status_code=status.HTTP_200_OK)
def readiness_check(store: Store = Depends(get_store)):
    """
    Readiness check endpoint with database status.

    Answers 503 with the error envelope when the store cannot be reached.
    """
    if not store.check_connection():
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "statut": STATUS_ERROR,
                "message": ServiceUnavailable.message,
                "database": "disconnected",
                "timestamp": datetime.utcnow().isoformat()
            }
        )

    return {
        "status": "ready",
        "database": "connected",
        "timestamp": datetime.utcnow().isoformat()
    }
