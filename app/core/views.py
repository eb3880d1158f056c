"""
Core views providing infrastructure endpoints.

This module contains views that are not part of the chat domain but are
needed to run it, such as the health check polled by the load balancer.
"""

import logging

from django.core.cache import cache
from django.db import DatabaseError, connection
from django.http import JsonResponse

logger = logging.getLogger(__name__)


def health_check(request):
    """
    Health check endpoint for monitoring and orchestration.

    Returns:
        JsonResponse with status and component health:
        - status: "healthy" or "unhealthy"
        - database: "connected" or "disconnected"
        - cache: "connected" or "disconnected"

    HTTP Status Codes:
        200: Database reachable (cache failures only degrade)
        503: Database unreachable
    """
    health_status = {
        "status": "healthy",
        "database": "unknown",
        "cache": "unknown",
    }
    is_healthy = True

    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
        health_status["database"] = "connected"
    except DatabaseError:
        logger.exception("Health check could not reach the database")
        health_status["database"] = "disconnected"
        health_status["status"] = "unhealthy"
        is_healthy = False

    # The cache backend is configured with IGNORE_EXCEPTIONS, so a dead Redis
    # shows up as a failed round trip rather than an exception.
    cache.set("health_check", "ok", timeout=1)
    if cache.get("health_check") == "ok":
        health_status["cache"] = "connected"
    else:
        health_status["cache"] = "disconnected"

    status_code = 200 if is_healthy else 503
    return JsonResponse(health_status, status=status_code)
