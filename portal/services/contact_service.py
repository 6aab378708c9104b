"""
Contact service: stores contact form messages for admins to read.
"""
import logging
from typing import List, Optional, Tuple
from sqlalchemy.orm import Session
from portal.models.contact_message import ContactMessage
from portal.models.user import User
from portal.schemas.contact import ContactMessageCreate
from portal.utils.datetime_utils import now_utc

logger = logging.getLogger(__name__)


def submit_message(db: Session, data: ContactMessageCreate, sender: Optional[User] = None) -> ContactMessage:
    """Store a message. The sender is linked when the caller is signed in."""
    contact = ContactMessage(
        user_id=sender.id if sender else None,
        full_name=data.full_name.strip(),
        email=data.email.lower(),
        message=data.message.strip(),
        created_at=now_utc(),
    )
    db.add(contact)
    db.commit()
    db.refresh(contact)

    logger.info("Contact message %s received (user_id=%s)", contact.id, contact.user_id)
    return contact


def list_messages(db: Session, skip: int = 0, limit: int = 100) -> Tuple[List[ContactMessage], int]:
    query = db.query(ContactMessage)
    total = query.count()
    messages = (
        query.order_by(ContactMessage.created_at.desc(), ContactMessage.id.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )
    return messages, total
