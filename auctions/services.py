# auctions/services.py
import logging
from decimal import Decimal, ROUND_HALF_UP

from django.conf import settings
from django.db import DatabaseError, transaction
from django.db.models import F
from django.utils import timezone

from notifications.utils import send_auction_notification
from .models import (
    AuctionProperty, AuctionStatus, AuctionWinner, AuctionEvent, AuctionEventType,
    Bid, BidStatus,
)
from .exceptions import (
    InvalidAmount, AuctionNotFound, AuctionNotStarted, AuctionPreviewNotStarted,
    AuctionEnded, AuctionNotAcceptingBids, AuctionNotAcceptingPurchases,
    BidTooLow, ReserveNotMet, BidConflict, BuyNowUnavailable,
    BidPersistenceError, AuctionUpdateError, PurchaseError,
)
from .utils import broadcast_auction_update

logger = logging.getLogger(__name__)

CENT = Decimal('0.01')

DEVELOPER_SHARE_RATE = Decimal(getattr(settings, 'AUCTION_DEVELOPER_SHARE_RATE', '0.07'))
BUY_NOW_PREMIUM_RATE = Decimal(getattr(settings, 'AUCTION_BUY_NOW_PREMIUM_RATE', '0.01'))

# (upper bound exclusive, increment)
INCREMENT_SCHEDULE = (
    (Decimal('100000'), Decimal('1000')),
    (Decimal('500000'), Decimal('5000')),
    (Decimal('1000000'), Decimal('10000')),
)
TOP_INCREMENT = Decimal('25000')


class _StaleAuction(Exception):
    """The auction row changed between validation and the conditional update."""


def _money(value) -> Decimal:
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def minimum_increment(current_bid) -> Decimal:
    current_bid = Decimal(current_bid)
    for upper_bound, increment in INCREMENT_SCHEDULE:
        if current_bid < upper_bound:
            return increment
    return TOP_INCREMENT


def minimum_bid(current_bid) -> Decimal:
    return Decimal(current_bid) + minimum_increment(current_bid)


def calculate_commission(sale_price, reserve_price, commission_rate) -> dict:
    """
    Split the amount a sale clears the reserve by between the platform and the
    property developer. The developer rate is fixed; the platform rate is per
    auction.
    """
    overprice = max(Decimal('0'), Decimal(sale_price) - Decimal(reserve_price))
    platform_share = _money(overprice * Decimal(commission_rate))
    developer_share = _money(overprice * DEVELOPER_SHARE_RATE)
    return {
        'overprice': _money(overprice),
        'platform_share': platform_share,
        'developer_share': developer_share,
        'total_commission': platform_share + developer_share,
    }


def _lock_auction(auction_id) -> AuctionProperty:
    try:
        return AuctionProperty.objects.select_for_update().get(pk=auction_id)
    except AuctionProperty.DoesNotExist:
        raise AuctionNotFound(auction_id)


def _outbid_others(auction, keep_bid, only_winning=True):
    qs = Bid.objects.filter(auction_property=auction).exclude(pk=keep_bid.pk)
    if only_winning:
        qs = qs.filter(is_winning=True)
    return qs.update(is_winning=False, status=BidStatus.OUTBID)


def _after_commit_safely(auction_id, callback):
    """
    Run ``callback`` once the surrounding transaction commits. By then the
    bid or sale is on record, so a failing notification or broadcast is
    logged instead of reaching the caller.
    """
    def _run():
        try:
            callback()
        except Exception:
            logger.exception("Post-commit update failed for auction %s", auction_id)

    transaction.on_commit(_run)


# =============================================================================
# Bidding
# =============================================================================


def place_bid(auction_id, user, amount, auto_bid_max=None, ip_address=None, user_agent='', now=None):
    """
    Accept a bid on a live auction.

    Validation runs in a fixed order and fails without side effects. The bid
    insert, the demotion of the previous winner and the auction update share
    one transaction; the auction update only applies if ``bid_count`` still
    holds the value that was validated against, otherwise the whole step is
    retried.
    """
    if amount is None or Decimal(amount) <= 0:
        raise InvalidAmount()
    amount = Decimal(amount)

    max_retries = getattr(settings, 'AUCTION_BID_MAX_RETRIES', 3)
    for attempt in range(1, max_retries + 1):
        try:
            return _place_bid_once(auction_id, user, amount, auto_bid_max, ip_address, user_agent, now)
        except _StaleAuction:
            logger.warning(
                "Auction %s changed during bid by user %s (attempt %s/%s)",
                auction_id, user.id, attempt, max_retries
            )
    raise BidConflict()


@transaction.atomic
def _place_bid_once(auction_id, user, amount, auto_bid_max, ip_address, user_agent, now):
    auction = _lock_auction(auction_id)

    now = now or timezone.now()
    if now < auction.start_time:
        raise AuctionNotStarted()
    if now > auction.end_time:
        raise AuctionEnded()
    if auction.status != AuctionStatus.LIVE:
        raise AuctionNotAcceptingBids()

    min_allowed = minimum_bid(auction.current_bid)
    if amount < min_allowed:
        raise BidTooLow(min_allowed, auction.current_bid)

    # sub-reserve bids are rejected outright rather than recorded and flagged
    if amount < auction.reserve_price:
        raise ReserveNotMet()

    previous_winner = (Bid.objects
                       .filter(auction_property=auction, is_winning=True)
                       .select_related('user')
                       .first())

    try:
        bid = Bid.objects.create(
            auction_property=auction,
            user=user,
            amount=amount,
            auto_bid_max=auto_bid_max,
            bid_time=now,
            ip_address=ip_address,
            user_agent=user_agent or '',
            is_winning=True,
        )
    except DatabaseError:
        logger.exception("Error placing bid on auction %s", auction.id)
        raise BidPersistenceError()

    _outbid_others(auction, bid)

    try:
        updated = (AuctionProperty.objects
                   .filter(pk=auction.pk, bid_count=auction.bid_count)
                   .update(current_bid=amount, bid_count=F('bid_count') + 1, updated_at=now))
    except DatabaseError:
        # leaving the atomic block with an error discards the bid row
        logger.exception("Error updating auction %s, rolling back bid %s", auction.id, bid.id)
        raise AuctionUpdateError()
    if not updated:
        raise _StaleAuction()

    new_count = auction.bid_count + 1
    AuctionEvent.objects.create(
        auction_property=auction,
        event_type=AuctionEventType.BID_PLACED,
        event_data={
            'bid_id': bid.id,
            'amount': amount,
            'user_id': user.id,
            'previous_bid': auction.current_bid,
            'bid_count': new_count,
        },
        created_at=now,
    )

    is_reserve_met = amount >= auction.reserve_price
    logger.info("Bid %s of %s accepted on auction %s (count=%s)", bid.id, amount, auction.id, new_count)

    def _after_commit():
        if previous_winner and previous_winner.user_id != user.id:
            send_auction_notification(previous_winner.user, auction, 'auction_outbid', amount=amount)
        broadcast_auction_update(auction.id, 'bid_update', {
            'newBid': float(amount),
            'bidCount': new_count,
            'userId': user.id,
            'timestamp': bid.bid_time.isoformat(),
            'isReserveMet': is_reserve_met,
        })

    _after_commit_safely(auction.id, _after_commit)

    return {
        'success': True,
        'bid': {
            'id': bid.id,
            'amount': bid.amount,
            'bidTime': bid.bid_time,
            'isWinning': True,
        },
        'auction': {
            'currentBid': amount,
            'bidCount': new_count,
            'isReserveMet': is_reserve_met,
        },
    }


def bid_history(auction_id, limit=None):
    limit = limit or getattr(settings, 'AUCTION_BID_HISTORY_LIMIT', 50)
    return (Bid.objects
            .filter(auction_property_id=auction_id)
            .order_by('-bid_time', '-id')
            .values('id', 'amount', 'bid_time', 'is_winning', 'status')[:limit])


# =============================================================================
# Buy now
# =============================================================================


@transaction.atomic
def buy_now(auction_id, buyer, ip_address=None, user_agent='', now=None):
    """
    Sell the auction immediately at its buy-now price.

    The bid, the demotion of earlier bids, the auction update, the winner
    record and the audit event are written in one transaction.
    """
    auction = _lock_auction(auction_id)

    if not auction.buy_now_price:
        raise BuyNowUnavailable()

    now = now or timezone.now()
    if now < auction.preview_start:
        raise AuctionPreviewNotStarted()
    if now > auction.end_time:
        raise AuctionEnded()
    if auction.status not in (AuctionStatus.PREVIEW, AuctionStatus.LIVE):
        raise AuctionNotAcceptingPurchases()

    price = auction.buy_now_price
    outbid_users = {
        b.user for b in
        Bid.objects.filter(auction_property=auction).exclude(user=buyer).select_related('user')
    }

    try:
        bid = Bid.objects.create(
            auction_property=auction,
            user=buyer,
            amount=price,
            bid_time=now,
            ip_address=ip_address,
            user_agent=user_agent or '',
            is_winning=True,
            status=BidStatus.WINNING,
        )
        _outbid_others(auction, bid, only_winning=False)

        commission = calculate_commission(price, auction.reserve_price, auction.commission_rate)

        auction.status = AuctionStatus.SOLD
        auction.current_bid = price
        auction.bid_count = F('bid_count') + 1
        auction.end_time = now
        auction.save(update_fields=['status', 'current_bid', 'bid_count', 'end_time', 'updated_at'])
        auction.refresh_from_db(fields=['bid_count'])

        # the premium is charged on top of the price; commission uses the raw price
        premium = _money(price * BUY_NOW_PREMIUM_RATE)
        AuctionWinner.objects.create(
            auction_property=auction,
            user=buyer,
            winning_bid=price,
            final_price=price + premium,
            commission_amount=commission['total_commission'],
            developer_share=commission['developer_share'],
            platform_share=commission['platform_share'],
        )

        AuctionEvent.objects.create(
            auction_property=auction,
            event_type=AuctionEventType.BUY_NOW_PURCHASE,
            event_data={
                'bid_id': bid.id,
                'purchase_price': price,
                'user_id': buyer.id,
                'commission': commission['total_commission'],
                'platform_share': commission['platform_share'],
                'developer_share': commission['developer_share'],
            },
            created_at=now,
        )
    except DatabaseError:
        logger.exception("Buy now failed on auction %s", auction.id)
        raise PurchaseError()

    logger.info("Auction %s sold via buy now to user %s for %s", auction.id, buyer.id, price)

    def _after_commit():
        send_auction_notification(buyer, auction, 'auction_bought', amount=price)
        for other in outbid_users:
            send_auction_notification(other, auction, 'auction_outbid', amount=price)
        broadcast_auction_update(auction.id, 'auction_sold', {
            'finalPrice': float(price),
            'winner': buyer.id,
            'endTime': now.isoformat(),
        })

    _after_commit_safely(auction.id, _after_commit)

    return {
        'success': True,
        'purchase': {
            'id': bid.id,
            'amount': price,
            'purchaseTime': bid.bid_time,
            'commission': commission['total_commission'],
            'platformShare': commission['platform_share'],
            'developerShare': commission['developer_share'],
            'platformFee': premium,
        },
        'auction': {
            'status': AuctionStatus.SOLD.value,
            'finalPrice': price,
            'winner': buyer.id,
        },
    }


# =============================================================================
# Lifecycle
# =============================================================================


@transaction.atomic
def activate_if_due(auction_id, now=None) -> bool:
    auction = AuctionProperty.objects.select_for_update().get(pk=auction_id)
    now = now or timezone.now()
    if auction.status == AuctionStatus.PREVIEW and auction.start_time <= now < auction.end_time:
        auction.status = AuctionStatus.LIVE
        auction.save(update_fields=['status', 'updated_at'])
        AuctionEvent.objects.create(
            auction_property=auction,
            event_type=AuctionEventType.AUCTION_STARTED,
            event_data={'start_time': auction.start_time, 'end_time': auction.end_time},
            created_at=now,
        )
        logger.info("Auction %s is now live", auction.id)
        return True
    return False


def activate_due_auctions(now=None) -> int:
    now = now or timezone.now()
    due = AuctionProperty.objects.filter(
        status=AuctionStatus.PREVIEW,
        start_time__lte=now,
        end_time__gt=now,
    ).values_list('id', flat=True)
    return sum(1 for auction_id in list(due) if activate_if_due(auction_id, now=now))


@transaction.atomic
def close_auction(auction_id, now=None) -> dict:
    """
    End an auction whose time ran out. A winning bid at or above reserve
    produces a winner record priced at the bid itself.
    """
    auction = AuctionProperty.objects.select_for_update().get(pk=auction_id)
    now = now or timezone.now()

    if auction.status not in (AuctionStatus.PREVIEW, AuctionStatus.LIVE) or now <= auction.end_time:
        return {'status': 'skipped'}

    winning_bid = (Bid.objects
                   .filter(auction_property=auction, is_winning=True)
                   .select_related('user')
                   .first())
    reserve_met = bool(winning_bid) and winning_bid.amount >= auction.reserve_price

    auction.status = AuctionStatus.ENDED
    auction.save(update_fields=['status', 'updated_at'])

    event_data = {'reserve_met': reserve_met, 'bid_count': auction.bid_count}
    if reserve_met:
        commission = calculate_commission(winning_bid.amount, auction.reserve_price, auction.commission_rate)
        AuctionWinner.objects.create(
            auction_property=auction,
            user=winning_bid.user,
            winning_bid=winning_bid.amount,
            final_price=winning_bid.amount,
            commission_amount=commission['total_commission'],
            developer_share=commission['developer_share'],
            platform_share=commission['platform_share'],
        )
        winning_bid.status = BidStatus.WINNING
        winning_bid.save(update_fields=['status'])
        event_data.update({
            'winner_id': winning_bid.user_id,
            'winning_bid': winning_bid.amount,
            'commission': commission['total_commission'],
        })

    AuctionEvent.objects.create(
        auction_property=auction,
        event_type=AuctionEventType.AUCTION_ENDED,
        event_data=event_data,
        created_at=now,
    )

    if reserve_met:
        _after_commit_safely(
            auction.id,
            lambda: send_auction_notification(winning_bid.user, auction, 'auction_won', amount=winning_bid.amount)
        )
        logger.info("Auction %s ended, won by user %s at %s", auction.id, winning_bid.user_id, winning_bid.amount)
        return {'status': 'ended_sold', 'winner_id': winning_bid.user_id}

    if winning_bid:
        # the reserve was raised above the leading bid after it was placed
        _after_commit_safely(
            auction.id,
            lambda: send_auction_notification(winning_bid.user, auction, 'auction_ended_no_sale',
                                              amount=winning_bid.amount)
        )
    logger.info("Auction %s ended without a sale", auction.id)
    return {'status': 'ended_no_sale'}


def close_due_auctions(now=None) -> int:
    now = now or timezone.now()
    due = AuctionProperty.objects.filter(
        status__in=[AuctionStatus.PREVIEW, AuctionStatus.LIVE],
        end_time__lt=now,
    ).values_list('id', flat=True)
    closed = 0
    for auction_id in list(due):
        if close_auction(auction_id, now=now)['status'] != 'skipped':
            closed += 1
    return closed
