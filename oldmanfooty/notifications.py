"""Email notifications sent after ownership changes.

Sending is best effort: a notification failure is logged and never undoes
the already committed claim.
"""

from email.message import EmailMessage
import logging
import smtplib
from typing import Optional

from .config.settings import AppConfig
from .models.carnival import Carnival

logger = logging.getLogger(__name__)


def build_claim_message(
    carnival: Carnival,
    claimant_name: Optional[str],
    club_name: Optional[str],
    recipient: str,
    sender: str
) -> EmailMessage:
    message = EmailMessage()
    message["Subject"] = f"Your carnival \"{carnival.title}\" has been claimed on Old Man Footy"
    message["From"] = sender
    message["To"] = recipient

    when = carnival.date.strftime('%d %B %Y') if carnival.date else 'a date to be confirmed'
    message.set_content(
        f"Hello,\n\n"
        f"The carnival \"{carnival.title}\" on {when}, imported from MySideline with you as "
        f"the contact, has been claimed by {claimant_name or 'a club delegate'}"
        f"{f' of {club_name}' if club_name else ''}.\n\n"
        f"They now manage the carnival listing on Old Man Footy. If this is not right, "
        f"please reply to this email and we will look into it.\n"
    )
    return message


def send_claim_notification(
    config: AppConfig,
    carnival: Carnival,
    claimant_name: Optional[str],
    club_name: Optional[str],
    recipient: Optional[str]
) -> bool:
    """
    Tell the original MySideline contact that their carnival was claimed.

    Returns:
        True if the email was handed to the SMTP server
    """
    if not recipient:
        logger.info(f"No original contact for carnival {carnival.id}, skipping claim notification")
        return False

    smtp = config.smtp
    sender = smtp.sender or smtp.username or 'noreply@oldmanfooty.au'
    message = build_claim_message(carnival, claimant_name, club_name, recipient, sender)

    if not smtp.is_configured:
        logger.info(f"SMTP host not configured. Logging claim notification instead: {message['Subject']} -> {recipient}")
        logger.debug(f"Notification body: {message.get_content()}")
        return False

    try:
        if smtp.use_ssl:
            with smtplib.SMTP_SSL(smtp.host, smtp.port or 465) as server:
                if smtp.username and smtp.password:
                    server.login(smtp.username, smtp.password)
                server.send_message(message)
        else:
            with smtplib.SMTP(smtp.host, smtp.port or 587) as server:
                if smtp.use_tls:
                    server.starttls()
                if smtp.username and smtp.password:
                    server.login(smtp.username, smtp.password)
                server.send_message(message)
    except Exception as e:
        logger.warning(f"Failed to send claim notification for carnival {carnival.id} to {recipient}: {e}")
        return False

    logger.info(f"Claim notification for carnival {carnival.id} sent to {recipient}")
    return True
