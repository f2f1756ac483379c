"""
Operator alert when a pass's fetch failure rate crosses SCRAPE_FAILURE_THRESHOLD.
Requires ADMIN_EMAIL (and SMTP settings). Advisory only: never raises.
"""
import logging

from courtwatch.config import settings
from courtwatch.core.scrape_config import SCRAPE_FAILURE_THRESHOLD
from courtwatch.services.notify.channels import send_email

logger = logging.getLogger(__name__)

MAX_FAILURES_IN_ALERT = 15


def alert_on_failure_rate(result, threshold: float = SCRAPE_FAILURE_THRESHOLD) -> bool:
    """
    Email the admin when result.failure_rate (percent) is at or above threshold.
    Returns True if an alert was sent.
    """
    total = result.fetched + result.failed
    if total == 0 or result.failure_rate < threshold:
        return False
    if not settings.admin_email:
        logger.warning(
            "Scrape failure rate %.1f%% >= %.1f%% but admin alerting is not configured (missing ADMIN_EMAIL)",
            result.failure_rate,
            threshold,
        )
        return False

    subject = f"Scrape alert: {result.failure_rate:.0f}% failure rate"
    lines = [
        "Scrape alert: high failure rate",
        "",
        f"Started: {result.started_at.isoformat()}",
        f"Success: {result.fetched}/{total} ({100 - result.failure_rate:.1f}%)",
        f"Failed: {result.failed}/{total} ({result.failure_rate:.1f}%)",
    ]
    if result.failures:
        lines += ["", "Failed targets:"]
        lines += [f"  {f}" for f in result.failures[:MAX_FAILURES_IN_ALERT]]
        if len(result.failures) > MAX_FAILURES_IN_ALERT:
            lines.append(f"  ... and {len(result.failures) - MAX_FAILURES_IN_ALERT} more")
    lines += ["", "Check server logs for detailed error messages."]
    try:
        send_email(settings.admin_email, subject, "\n".join(lines))
    except Exception as e:
        logger.warning("Failed to send scrape failure alert: %s", e, exc_info=True)
        return False
    logger.info("Admin alert sent: %.1f%% failure rate", result.failure_rate)
    return True
