import logging

from notifications.models import Notification, NotificationType

logger = logging.getLogger(__name__)


def _auction_messages(auction_id, amount):
    return {
        NotificationType.AUCTION_OUTBID: (
            f"تمت المزايدة عليك في المزاد #{auction_id}. المزايدة الحالية: {amount}.",
            f"You've been outbid on auction #{auction_id}. Current bid: {amount}.",
        ),
        NotificationType.AUCTION_WON: (
            f"ربحت المزاد #{auction_id} بمبلغ {amount}.",
            f"You won auction #{auction_id} for {amount}.",
        ),
        NotificationType.AUCTION_BOUGHT: (
            f"اشتريت العقار في المزاد #{auction_id} بسعر الشراء الفوري {amount}.",
            f"You bought auction #{auction_id} for {amount} using buy now.",
        ),
        NotificationType.AUCTION_ENDED_NO_SALE: (
            f"انتهى المزاد #{auction_id} دون الوصول إلى السعر الأدنى.",
            f"Auction #{auction_id} ended without meeting the reserve price.",
        ),
    }


def send_auction_notification(user, auction, notification_type, amount=None):
    """Create the bilingual in-app notification for an auction outcome."""
    message_ar, message_en = _auction_messages(auction.id, amount)[NotificationType(notification_type)]

    notification = Notification.objects.create(
        user=user,
        notification_type=notification_type,
        message_ar=message_ar,
        message_en=message_en,
        content_object=auction,
        extra_data={'auction_id': auction.id, 'amount': str(amount) if amount is not None else None},
    )
    logger.debug("Sent %s notification to user %s", notification_type, user.id)
    return notification
