"""
Reader for forwarded HARO emails saved as .eml attachments.
"""

import email
import email.utils
from dataclasses import dataclass
from datetime import datetime
from email import policy
from email.message import EmailMessage
from typing import Optional, Union

DEFAULT_SUBJECT = 'HARO Email'


@dataclass
class EmlContent:
    subject: str
    body: str
    date: Optional[datetime] = None


def _parse_date(msg: EmailMessage) -> Optional[datetime]:
    try:
        value = msg.get('Date')
        if not value:
            return None
        parsed = getattr(value, 'datetime', None)
        return parsed or email.utils.parsedate_to_datetime(str(value))
    except (TypeError, ValueError, IndexError):
        return None


def _extract_body(msg: EmailMessage) -> str:
    part = msg.get_body(preferencelist=('html', 'plain'))
    if part is None:
        if msg.is_multipart():
            return ''
        part = msg
    try:
        return part.get_content()
    except (LookupError, KeyError):
        payload = part.get_payload(decode=True) or b''
        return payload.decode('utf-8', errors='replace')


def read_eml(raw: Union[bytes, str]) -> EmlContent:
    """
    Parse an RFC 822 message into subject, body and date.

    The HTML part is preferred over plain text since the body normalizer
    strips markup anyway.

    Args:
        raw: Full .eml file content

    Returns:
        EmlContent; date is None when the Date header is missing or invalid
    """
    if isinstance(raw, bytes):
        msg = email.message_from_bytes(raw, policy=policy.default)
    else:
        msg = email.message_from_string(raw, policy=policy.default)

    subject = str(msg.get('Subject', '') or '').strip()

    return EmlContent(
        subject=subject or DEFAULT_SUBJECT,
        body=_extract_body(msg).strip(),
        date=_parse_date(msg),
    )
