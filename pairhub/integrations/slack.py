from __future__ import annotations

import httpx
import structlog

from pairhub.services.exceptions import UpstreamError

logger = structlog.get_logger(__name__)

# Answers from Slack that mean the person is already covered
BENIGN_ERRORS = {"already_invited", "already_in_team", "already_in_team_invited_user"}


def invite_url(team: str) -> str:
    return f"https://{team}.slack.com/api/users.admin.invite"


def invite_to_slack(
    email: str,
    token: str,
    team: str,
    transport: httpx.BaseTransport | None = None,
    timeout: float = 10.0,
) -> bool:
    """Invite ``email`` to the community workspace.

    Returns True when Slack sent an invite and False when the address was
    already invited or a member. Any other failure raises UpstreamError.
    """
    try:
        with httpx.Client(timeout=timeout, transport=transport) as client:
            response = client.post(
                invite_url(team),
                data={"email": email, "token": token, "set_active": "true"},
            )
    except httpx.RequestError as exc:
        raise UpstreamError("slack_unavailable", f"failed to reach Slack: {exc}") from exc

    if response.status_code != 200:
        raise UpstreamError("slack_invite_failed", f"Slack answered {response.status_code}")

    payload = response.json()
    if payload.get("ok"):
        logger.info("slack_invite_sent", email=email)
        return True

    error = payload.get("error") or "unknown_error"
    if error in BENIGN_ERRORS:
        logger.info("slack_invite_skipped", email=email, reason=error)
        return False
    raise UpstreamError("slack_invite_rejected", error)
