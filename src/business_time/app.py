"""
Flask Application Factory.

Creates and configures the business-time Flask application.
"""

import os
import signal
import sys
from typing import Optional

from flask import Flask

from business_time.api import api_bp
from business_time.config import settings
from business_time.infrastructure.logging import log_request_context, logger
from business_time.infrastructure.metrics import setup_metrics_middleware
from business_time.services import HolidayDataProvider


def _handle_sigterm(signum: int, frame) -> None:
    """Handle SIGTERM for graceful shutdown."""
    logger.info(
        "Received SIGTERM, shutting down gracefully",
        extra={"extra_fields": {"signal": signum}}
    )
    sys.exit(0)


signal.signal(signal.SIGTERM, _handle_sigterm)


def create_app(
    config: Optional[dict] = None,
    provider: Optional[HolidayDataProvider] = None,
) -> Flask:
    """
    Create and configure the Flask application.

    Args:
        config: Optional configuration dictionary.
        provider: Holiday provider to use; one is built from settings if omitted.

    Returns:
        Configured Flask application.
    """
    app = Flask(__name__)

    app.json.sort_keys = False

    if config:
        app.config.update(config)

    app.extensions["holiday_provider"] = provider or HolidayDataProvider()

    log_request_context(app)
    setup_metrics_middleware(app)

    app.register_blueprint(api_bp)

    logger.info(
        "Application initialized",
        extra={"extra_fields": {
            "environment": os.environ.get("ENVIRONMENT", "development"),
            "timezone": settings.calendar.timezone_name,
            "working_hours": (
                f"{settings.calendar.working_hours.start}:00-"
                f"{settings.calendar.working_hours.end}:00"
            ),
            "lunch_break": (
                f"{settings.calendar.working_hours.lunch_start}:00-"
                f"{settings.calendar.working_hours.lunch_end}:00"
            ),
            "holidays_url_configured": settings.holidays.is_configured,
        }}
    )

    return app


app = create_app()


if __name__ == "__main__":
    app.run(
        host="0.0.0.0",
        port=settings.port,
        debug=settings.debug,
    )
