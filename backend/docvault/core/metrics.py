"""
Prometheus Metrics Module.

Exposes application metrics for monitoring with Prometheus.
"""

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, Info, generate_latest

from docvault.config import settings

# ============================================
# Application Info
# ============================================
APP_INFO = Info(
    "app_info",
    "Application information"
)
APP_INFO.info({
    "app_name": "docvault",
    "version": settings.APP_VERSION,
})

# ============================================
# Upload Metrics
# ============================================
UPLOADS_TOTAL = Counter(
    "uploads_total",
    "Total number of document uploads",
    ["status", "content_type"]
)

UPLOAD_SIZE_BYTES = Histogram(
    "upload_size_bytes",
    "Size of uploaded documents in bytes",
    buckets=[10240, 102400, 1048576, 5242880, 10485760, 26214400, 52428800]  # 10KB to 50MB
)

# ============================================
# Retrieval Metrics
# ============================================
DOCUMENT_READS_TOTAL = Counter(
    "document_reads_total",
    "Total number of document view/download requests",
    ["mode", "status"]
)

# ============================================
# Document Admin Metrics
# ============================================
DOCUMENT_OPERATIONS_TOTAL = Counter(
    "document_operations_total",
    "Total number of admin document operations",
    ["operation"]
)

# ============================================
# HTTP Request Metrics
# ============================================
HTTP_REQUESTS_TOTAL = Counter(
    "http_requests_total",
    "Total number of HTTP requests",
    ["method", "endpoint", "status_code"]
)

HTTP_REQUEST_DURATION_SECONDS = Histogram(
    "http_request_duration_seconds",
    "Duration of HTTP requests",
    ["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0]
)

# ============================================
# Metrics Router
# ============================================
router = APIRouter()


@router.get("/metrics", include_in_schema=False)
async def metrics():
    """
    Expose Prometheus metrics endpoint.

    Returns metrics in Prometheus text format.
    """
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


# ============================================
# Helper Functions
# ============================================
def track_upload(status: str, content_type: str, size_bytes: int):
    """Track an upload event."""
    UPLOADS_TOTAL.labels(status=status, content_type=content_type).inc()
    if size_bytes > 0:
        UPLOAD_SIZE_BYTES.observe(size_bytes)


def track_document_read(mode: str, status: str):
    """Track a view or download attempt."""
    DOCUMENT_READS_TOTAL.labels(mode=mode, status=status).inc()


def track_document_operation(operation: str):
    """Track an admin operation (toggle, delete, reconcile)."""
    DOCUMENT_OPERATIONS_TOTAL.labels(operation=operation).inc()


def track_http_request(method: str, endpoint: str, status_code: int, duration_seconds: float):
    """Track an HTTP request."""
    HTTP_REQUESTS_TOTAL.labels(
        method=method,
        endpoint=endpoint,
        status_code=str(status_code)
    ).inc()
    HTTP_REQUEST_DURATION_SECONDS.labels(
        method=method,
        endpoint=endpoint
    ).observe(duration_seconds)
