import structlog
from kombu.exceptions import OperationalError

from pairhub.core.config import settings
from pairhub.integrations.slack import invite_to_slack
from pairhub.models import User
from pairhub.services.exceptions import UpstreamError
from pairhub.worker.celery_app import celery_app

logger = structlog.get_logger(__name__)

INVITE_TASK = "invite_to_slack"


@celery_app.task(
    name=INVITE_TASK,
    autoretry_for=(UpstreamError,),
    retry_backoff=True,
    max_retries=3,
)
def invite_to_slack_task(email: str) -> dict:
    if not settings.slack_token or not settings.slack_team:
        logger.warning("slack_invite_not_configured", email=email)
        return {"email": email, "status": "skipped"}

    sent = invite_to_slack(email, token=settings.slack_token, team=settings.slack_team)
    return {"email": email, "status": "invited" if sent else "already_member"}


def queue_slack_invite(user: User) -> None:
    """Queue a community invite for a freshly created user.

    Users without a public email are skipped, and a broker outage is
    logged instead of failing the login that triggered it.
    """
    if not user.email:
        return
    if not settings.slack_token:
        logger.warning("slack_invite_not_configured", user_id=user.user_id)
        return
    try:
        celery_app.send_task(INVITE_TASK, args=[user.email])
    except OperationalError:
        logger.exception("slack_invite_enqueue_failed", user_id=user.user_id)
