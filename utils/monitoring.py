"""
Monitoring and observability for the HR Records Gateway.
Integrates with Sentry and keeps lightweight in-process request metrics.
"""

import logging
import threading
import time
import uuid
from typing import Any, Dict, Optional

from flask import Flask, g, request

logger = logging.getLogger(__name__)


class MonitoringConfig:
    """Configuration for monitoring and observability."""

    def __init__(self, app: Flask = None):
        """
        Initialize monitoring configuration.

        Args:
            app: Flask application instance
        """
        self.app = app
        self.sentry_sdk = None
        self._lock = threading.Lock()
        self.metrics: Dict[str, Any] = {}

        if app:
            self.init_app(app)

    def init_app(self, app: Flask):
        """
        Initialize monitoring with Flask app.

        Args:
            app: Flask application instance
        """
        self.app = app
        self.started_at = time.time()
        self.metrics = {
            'requests_total': 0,
            'requests_by_status': {},
            'response_times': [],
            'records_requests': 0,
            'upload_requests': 0,
            'errors_total': 0,
        }

        # Initialize Sentry for error tracking
        self._init_sentry(app)

        # Setup request tracking
        self._setup_request_tracking(app)

        logger.info("Monitoring system initialized")

    def _init_sentry(self, app: Flask):
        """Initialize Sentry error tracking."""
        sentry_dsn = app.config.get('SENTRY_DSN')

        if not sentry_dsn:
            logger.info("SENTRY_DSN not configured, skipping Sentry initialization")
            return

        import sentry_sdk
        from sentry_sdk.integrations.flask import FlaskIntegration

        sentry_sdk.init(
            dsn=sentry_dsn,
            integrations=[
                FlaskIntegration(
                    transaction_style='endpoint'
                ),
            ],
            traces_sample_rate=0.1,  # 10% of transactions
            send_default_pii=False,  # Don't send PII
            environment=app.config.get('ENVIRONMENT', 'development'),
            release=app.config.get('APP_VERSION', 'unknown'),
            before_send=filter_sentry_event,
        )

        self.sentry_sdk = sentry_sdk
        logger.info("Sentry error tracking initialized")

    def _setup_request_tracking(self, app: Flask):
        """Setup request/response tracking middleware."""

        @app.before_request
        def track_request_start():
            """Track request start time and metadata."""
            g.start_time = time.time()
            g.request_id = generate_request_id()

            with self._lock:
                self.metrics['requests_total'] += 1
                if request.path.startswith('/api/cloudinary/upload'):
                    self.metrics['upload_requests'] += 1
                elif request.path.startswith('/api/'):
                    self.metrics['records_requests'] += 1

        @app.after_request
        def track_request_end(response):
            """Track request completion and metrics."""
            if hasattr(g, 'start_time'):
                response_time = time.time() - g.start_time
                status_key = f"{response.status_code // 100}xx"

                with self._lock:
                    times = self.metrics['response_times']
                    times.append(response_time)
                    del times[:-1000]

                    by_status = self.metrics['requests_by_status']
                    by_status[status_key] = by_status.get(status_key, 0) + 1

                    if response.status_code >= 400:
                        self.metrics['errors_total'] += 1

                response.headers['X-Response-Time'] = f"{response_time * 1000:.2f}ms"

            if hasattr(g, 'request_id'):
                response.headers['X-Request-ID'] = g.request_id

            return response

    def get_health_metrics(self) -> Dict[str, Any]:
        """
        Get current health metrics.

        Returns:
            Dictionary of health metrics
        """
        with self._lock:
            response_times = list(self.metrics.get('response_times', [])[-100:])
            total_requests = self.metrics.get('requests_total', 0)
            total_errors = self.metrics.get('errors_total', 0)
            by_status = dict(self.metrics.get('requests_by_status', {}))
            records_requests = self.metrics.get('records_requests', 0)
            upload_requests = self.metrics.get('upload_requests', 0)

        avg_response_time = sum(response_times) / len(response_times) if response_times else 0
        error_rate = (total_errors / total_requests * 100) if total_requests > 0 else 0

        return {
            'requests_total': total_requests,
            'requests_by_status': by_status,
            'avg_response_time_ms': round(avg_response_time * 1000, 2),
            'error_rate_percent': round(error_rate, 2),
            'records_requests': records_requests,
            'upload_requests': upload_requests,
            'uptime_seconds': round(time.time() - self.started_at, 1)
        }


def generate_request_id() -> str:
    """Generate unique request ID."""
    return uuid.uuid4().hex


def filter_sentry_event(event: Dict[str, Any], hint: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Filter and sanitize Sentry events.

    Args:
        event: Sentry event data
        hint: Sentry hint data

    Returns:
        Filtered event data or None to drop the event
    """
    # Don't send health check errors
    if 'request' in event and event['request'].get('url', '').endswith('/health'):
        return None

    # Remove authorization headers
    if 'request' in event:
        headers = event['request'].get('headers', {})
        for name in list(headers):
            if name.lower() == 'authorization':
                headers[name] = '[Filtered]'

    return event


def health_status(metrics: Dict[str, Any]) -> str:
    status = 'healthy'
    if metrics['error_rate_percent'] > 10:
        status = 'degraded'
    if metrics['avg_response_time_ms'] > 5000:
        status = 'slow'
    return status


def init_monitoring(app: Flask) -> MonitoringConfig:
    """
    Initialize monitoring with Flask app.

    Args:
        app: Flask application instance
    """
    monitoring = MonitoringConfig(app)
    app.extensions['monitoring'] = monitoring

    @app.route('/health')
    def health():
        """Health check with metrics, for load balancers."""
        health_metrics = monitoring.get_health_metrics()

        return {
            'status': health_status(health_metrics),
            'service': 'hr-records-gateway',
            'version': app.config.get('APP_VERSION', 'unknown'),
            'environment': app.config.get('ENVIRONMENT', 'unknown'),
            'metrics': health_metrics
        }

    @app.route('/metrics')
    def metrics():
        """Prometheus-style metrics endpoint."""
        metrics_data = monitoring.get_health_metrics()

        lines = []
        lines.append("# HELP hr_gateway_requests_total Total number of requests")
        lines.append("# TYPE hr_gateway_requests_total counter")
        lines.append(f"hr_gateway_requests_total {metrics_data['requests_total']}")

        lines.append("# HELP hr_gateway_response_time_ms Average response time in milliseconds")
        lines.append("# TYPE hr_gateway_response_time_ms gauge")
        lines.append(f"hr_gateway_response_time_ms {metrics_data['avg_response_time_ms']}")

        lines.append("# HELP hr_gateway_error_rate_percent Error rate percentage")
        lines.append("# TYPE hr_gateway_error_rate_percent gauge")
        lines.append(f"hr_gateway_error_rate_percent {metrics_data['error_rate_percent']}")

        return '\n'.join(lines), 200, {'Content-Type': 'text/plain'}

    return monitoring
