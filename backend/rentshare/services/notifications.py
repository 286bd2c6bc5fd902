# rentshare/services/notifications.py
"""
Outbound booking notifications. Delivery (email, push, SMS) is not wired up:
messages are built and written to the log.
"""
import logging
from typing import Dict, List, Optional

from rentshare.services.availability import CANCELLED, CONFIRMED, REJECTED

logger = logging.getLogger(__name__)


def build_status_notifications(
    booking,
    item_title: str,
    status: str,
    acted_by: Optional[str],
) -> List[Dict[str, str]]:
    if status == CONFIRMED:
        return [{
            "to": booking.renter_email,
            "message": f'Your booking request for "{item_title}" has been approved!',
            "type": "booking_approved",
        }]
    if status == REJECTED:
        return [{
            "to": booking.renter_email,
            "message": f'Your booking request for "{item_title}" has been declined.',
            "type": "booking_rejected",
        }]
    if status == CANCELLED:
        if acted_by == booking.renter_email:
            return [{
                "to": booking.owner_email,
                "message": f'A booking request for "{item_title}" has been cancelled by the requester.',
                "type": "booking_cancelled_by_requester",
            }]
        if acted_by == booking.owner_email:
            return [{
                "to": booking.renter_email,
                "message": f'Your booking request for "{item_title}" has been cancelled by the owner.',
                "type": "booking_cancelled_by_owner",
            }]
    return []


def send_booking_status_notification(
    booking,
    item_title: str,
    status: str,
    acted_by: Optional[str],
) -> List[Dict[str, str]]:
    notifications = build_status_notifications(booking, item_title, status, acted_by)
    for n in notifications:
        logger.info(
            "notification %s -> %s (booking %s): %s",
            n["type"], n["to"], booking.id, n["message"],
        )
    return notifications
