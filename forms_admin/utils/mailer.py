"""Fire-and-forget transactional email for reset and onboarding links"""
import json
import threading
from typing import Any, Dict, Optional

from forms_admin.config import Settings
from forms_admin.utils.logger import logger

SENDGRID_URL = "https://api.sendgrid.com/v3/mail/send"


def _redact_email(email: str) -> str:
    if "@" not in email:
        return "redacted"
    local, domain = email.split("@", 1)
    return f"{local[:2]}***@{domain}"


def _deliver(body: bytes, headers: Dict[str, str], recipient: str) -> None:
    """Deliver the SendGrid request in a daemon background thread."""
    try:
        import requests
        resp = requests.post(SENDGRID_URL, data=body, headers=headers, timeout=10)
        if resp.status_code >= 400:
            logger.warning(
                "Email delivery rejected",
                extra={"email": _redact_email(recipient), "status_code": resp.status_code},
            )
        else:
            logger.info("Email delivered", extra={"email": _redact_email(recipient)})
    except Exception as exc:
        logger.warning(
            "Email delivery failed",
            extra={"email": _redact_email(recipient), "reason": str(exc)},
        )


def _compose(url: str, is_onboarding: bool, ttl_text: str) -> Dict[str, str]:
    if is_onboarding:
        subject = "Set up your Forms Admin account"
        text = (
            "An administrator has created a Forms Admin account for you.\n\n"
            f"Set your password here:\n{url}\n\n"
            f"This link expires in {ttl_text} and can only be used once."
        )
        action = "Set Password"
    else:
        subject = "Password Reset Request"
        text = (
            "We received a request to reset the password for your Forms Admin account.\n\n"
            f"Reset your password here:\n{url}\n\n"
            f"This link expires in {ttl_text} and can only be used once.\n"
            "If you didn't request this, you can ignore this email; your password will not change."
        )
        action = "Reset Password"

    html = (
        f"<p>{text.splitlines()[0]}</p>"
        f'<p><a href="{url}">{action}</a></p>'
        f"<p>This link expires in {ttl_text} and can only be used once.</p>"
    )
    return {"subject": subject, "text": text, "html": html}


class Mailer:
    """Sends reset and onboarding links through SendGrid.

    Without ``SENDGRID_API_KEY``/``SENDGRID_FROM_EMAIL`` it runs in dev mode and
    logs the link instead, except in production where the link is dropped.  Sending never blocks the request: delivery happens in
    a daemon thread and failures are only logged.
    """

    def __init__(self, settings: Settings):
        self.settings = settings

    def send_reset_email(self, email: str, url: str, is_onboarding: bool = False) -> bool:
        """Queue an email carrying ``url``. Returns False in dev mode (nothing sent)."""
        if is_onboarding:
            ttl_text = f"{self.settings.ONBOARDING_TOKEN_TTL_HOURS} hours"
        else:
            ttl_text = f"{self.settings.RESET_TOKEN_TTL_MINUTES} minutes"
        message = _compose(url, is_onboarding, ttl_text)

        if not self.settings.sendgrid_configured:
            if self.settings.is_production:
                # Links carry raw tokens; production logs never include them
                logger.error(
                    "Email not configured; link was not sent",
                    extra={"email": _redact_email(email), "action": "email_not_configured"},
                )
                return False
            logger.info(
                f"Email not configured; {'onboarding' if is_onboarding else 'reset'} link: {url}",
                extra={"email": _redact_email(email), "action": "email_dev_mode"},
            )
            return False

        payload: Dict[str, Any] = {
            "personalizations": [{"to": [{"email": email}]}],
            "from": {"email": self.settings.SENDGRID_FROM_EMAIL},
            "subject": message["subject"],
            "content": [
                {"type": "text/plain", "value": message["text"]},
                {"type": "text/html", "value": message["html"]},
            ],
        }
        body = json.dumps(payload).encode()
        headers = {
            "Authorization": f"Bearer {self.settings.SENDGRID_API_KEY}",
            "Content-Type": "application/json",
        }

        threading.Thread(target=_deliver, args=(body, headers, email), daemon=True).start()
        return True


def build_link(settings: Settings, path: str, token: Optional[str]) -> str:
    return f"{settings.base_url}{path}?token={token}"
