"""
Prometheus metrics service.

Collects HTTP and rebalance metrics, exposed on /metrics.
"""
import logging
from prometheus_client import Counter, Histogram, Info
from prometheus_client import make_asgi_app

from rebalancer import __version__

logger = logging.getLogger(__name__)

# Application info
app_info = Info('rebalancer_info', 'Rebalancer API Information')
app_info.info({
    'version': __version__,
    'name': 'Earn Rebalancer API'
})

# HTTP request metrics
http_requests_total = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status']
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint']
)

# Rebalance metrics
rebalances_total = Counter(
    'rebalances_total',
    'Total rebalance calls by planned action and outcome',
    ['symbol', 'action', 'outcome']
)

rebalance_trade_value = Counter(
    'rebalance_trade_value_total',
    'Quote value filled by executed rebalances',
    ['symbol', 'side']
)

rebalance_errors_total = Counter(
    'rebalance_errors_total',
    'Total rebalance errors',
    ['error_type']
)


def record_http_request(method: str, endpoint: str, status: int, duration_seconds: float):
    """Record one served HTTP request."""
    http_requests_total.labels(method=method, endpoint=endpoint, status=str(status)).inc()
    http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(duration_seconds)


def record_rebalance(symbol: str, action: str, outcome: str, side: str = "", quote_value: float = 0.0):
    """Record a completed rebalance call."""
    rebalances_total.labels(symbol=symbol, action=action, outcome=outcome).inc()
    if side and quote_value > 0:
        rebalance_trade_value.labels(symbol=symbol, side=side).inc(quote_value)


def record_rebalance_error(error_type: str):
    """Record a failed rebalance call."""
    rebalance_errors_total.labels(error_type=error_type).inc()


# ASGI application (mounted on FastAPI)
metrics_app = make_asgi_app()
