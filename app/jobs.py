"""
Background job processing using RQ (Redis Queue)
"""

import logging
import os
from datetime import timedelta
from typing import Optional
from rq import Queue
from rq.job import Job
import redis

logger = logging.getLogger(__name__)

# Redis connection
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")


def get_redis_connection():
    """Get Redis connection from URL, or None when Redis is unreachable."""
    try:
        conn = redis.from_url(REDIS_URL)
        conn.ping()
        return conn
    except redis.exceptions.RedisError as e:
        logger.warning("Failed to connect to Redis: %s", e)
        return None


def get_queue(name: str = "default") -> Optional[Queue]:
    """Get RQ queue instance."""
    redis_conn = get_redis_connection()
    if redis_conn:
        return Queue(name, connection=redis_conn)
    return None


def run_sweep(ttl_hours: Optional[int] = None) -> dict:
    """
    Background job removing abandoned signups and their temporary documents.

    Args:
        ttl_hours: Age after which pending data expires; defaults to PENDING_TTL_HOURS

    Returns:
        Dict listing the expired session ids
    """
    from app.services import get_services

    logger.info("Starting expiry sweep")
    ttl = timedelta(hours=ttl_hours) if ttl_hours is not None else None
    expired = get_services().gate.sweep_expired(ttl=ttl)
    logger.info("Expiry sweep removed %d sessions", len(expired))
    return {"expired": expired}


def enqueue_sweep(ttl_hours: Optional[int] = None) -> Optional[str]:
    """
    Enqueue an expiry sweep job.

    Returns:
        Job ID if successful, None if Redis not available
    """
    queue = get_queue("maintenance")
    if queue:
        job = queue.enqueue(run_sweep, ttl_hours, job_timeout="5m")
        return job.id
    return None


def get_job_status(job_id: str) -> dict:
    """
    Get the status and result of a job.

    Args:
        job_id: The job ID

    Returns:
        Dict containing job status and result
    """
    redis_conn = get_redis_connection()
    if not redis_conn:
        return {"status": "error", "error": "Redis not available"}

    try:
        job = Job.fetch(job_id, connection=redis_conn)
    except Exception as e:
        return {"status": "error", "error": f"Job not found: {str(e)}"}

    result = {
        "job_id": job_id,
        "status": job.get_status(),
        "created_at": job.created_at.isoformat() if job.created_at else None,
        "started_at": job.started_at.isoformat() if job.started_at else None,
        "ended_at": job.ended_at.isoformat() if job.ended_at else None,
    }

    if job.is_finished:
        if job.result:
            result["result"] = job.result
    elif job.is_failed:
        result["error"] = str(job.exc_info) if job.exc_info else "Job failed"

    return result
