import logging
import requests
from app.core.config import settings

logger = logging.getLogger(__name__)

EXPENSE_TITLE = "💸 New Expense Added"

def build_messages(tokens: list[str], body: str, title: str, data: dict | None = None):
    return [
        {
            "to": token,
            "title": title,
            "body": body,
            "sound": "default",
            "data": data or {},
        }
        for token in tokens
    ]

def send_push(tokens: list[str | None], body: str, title: str = EXPENSE_TITLE, data: dict | None = None) -> bool:
    """
    Fire-and-forget POST to the push relay. Failures are logged and never
    raised; callers must not depend on delivery.
    """
    tokens = [t for t in tokens if t]
    if not tokens:
        logger.info("Skipping push '%s': no recipient tokens", title)
        return False

    try:
        r = requests.post(
            settings.PUSH_RELAY_URL,
            json=build_messages(tokens, body, title, data),
            headers={"Accept": "application/json"},
            timeout=settings.PUSH_TIMEOUT,
        )
        r.raise_for_status()
    except requests.RequestException as e:
        logger.warning("Push dispatch to %d recipient(s) failed: %s", len(tokens), e)
        return False

    return True
