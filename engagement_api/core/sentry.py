import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration


def init_sentry(dsn: str, environment: str = "dev",
                release: str | None = None) -> None:
    """Enable error reporting; a blank DSN keeps Sentry off."""
    if not dsn:
        return
    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        release=release,
        integrations=[
            # логи идут в stdout JSON-ом, в Sentry уходят только исключения
            LoggingIntegration(level=None, event_level=None),
            FastApiIntegration(),
        ],
        traces_sample_rate=0.2,
        send_default_pii=False,
    )
