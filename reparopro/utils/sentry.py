import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration
from sentry_sdk.integrations.httpx import HttpxIntegration
from sentry_sdk.integrations.starlette import StarletteIntegration
import logging

logger = logging.getLogger(__name__)


def init_sentry(dsn, environment, traces_sample_rate=0.1):
    """
    Initialise Sentry error monitoring.

    Args:
        dsn: Sentry DSN
        environment: development, staging or production
        traces_sample_rate: sampling rate for performance traces
    """
    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        traces_sample_rate=traces_sample_rate,
        integrations=[
            FastApiIntegration(),
            SqlalchemyIntegration(),
            HttpxIntegration(),
            StarletteIntegration()
        ],
        # Customer names, phones and signatures stay out of events
        send_default_pii=False,
        attach_stacktrace=True,
        max_breadcrumbs=50,
        # Domain errors are answered to the client, not reported
        ignore_errors=[
            "HTTPException",
            "QuoteError",
        ],
    )

    logger.info(f"Sentry initialised for environment: {environment}")
