import logging
import re
from typing import List, Union

import requests

from aura_store.config import settings

logger = logging.getLogger(__name__)

BREVO_API_URL = "https://api.brevo.com/v3/smtp/email"

def is_valid_email(email):
    if isinstance(email, list):
        return all(is_valid_email(e) for e in email)

    if not email:
        return False

    return re.match(r"[^@]+@[^@]+\.[^@]+", email) is not None


def send_email(to: Union[str, List[str]], subject: str, html: str) -> bool:
    """
    Send email via Brevo. Returns False instead of raising when the mail
    cannot be delivered.
    """
    if isinstance(to, list):
        valid_emails = [e for e in to if is_valid_email(e)]
    else:
        valid_emails = [to] if is_valid_email(to) else []

    if not valid_emails:
        logger.warning(f"No valid emails found: {to}")
        return False

    if not settings.BREVO_API_KEY:
        logger.info(f"BREVO_API_KEY not set; skipping email '{subject}' to {valid_emails}")
        return False

    payload = {
        "sender": {"name": settings.STORE_NAME, "email": settings.EMAIL_SENDER},
        "to": [{"email": e} for e in valid_emails],
        "subject": subject,
        "htmlContent": html,
    }

    try:
        response = requests.post(
            BREVO_API_URL,
            json=payload,
            headers={
                "api-key": settings.BREVO_API_KEY,
                "accept": "application/json",
                "content-type": "application/json",
            },
            timeout=10,
        )
        response.raise_for_status()
    except requests.RequestException as e:
        logger.error(f"Brevo email '{subject}' failed: {e}")
        return False

    logger.info(f"Email '{subject}' sent to {valid_emails}")
    return True
