from datetime import timedelta
from decimal import Decimal
from unittest import mock

import pytest
from django.db import DatabaseError
from django.utils import timezone

from auctions import services
from auctions.exceptions import (
    BuyNowUnavailable, AuctionPreviewNotStarted, AuctionEnded,
    AuctionNotAcceptingPurchases, AuctionNotFound, PurchaseError,
)
from auctions.models import (
    AuctionStatus, AuctionWinner, AuctionEvent, AuctionEventType, Bid, BidStatus,
)
from notifications.models import Notification

pytestmark = pytest.mark.django_db


@pytest.fixture
def buyable_auction(make_auction):
    return make_auction(
        reserve_price=Decimal('800000'),
        buy_now_price=Decimal('1000000'),
        commission_rate=Decimal('0.05'),
    )


def test_unknown_auction(bidder):
    with pytest.raises(AuctionNotFound):
        services.buy_now(424242, bidder)


def test_no_buy_now_price(live_auction, bidder):
    with pytest.raises(BuyNowUnavailable):
        services.buy_now(live_auction.id, bidder)

    live_auction.refresh_from_db()
    assert live_auction.status == AuctionStatus.LIVE
    assert live_auction.bid_count == 0
    assert not Bid.objects.exists()


def test_before_preview(make_auction, bidder):
    now = timezone.now()
    auction = make_auction(
        status=AuctionStatus.PREVIEW,
        buy_now_price=Decimal('1000000'),
        preview_start=now + timedelta(days=1),
        start_time=now + timedelta(days=2),
        end_time=now + timedelta(days=3),
    )

    with pytest.raises(AuctionPreviewNotStarted):
        services.buy_now(auction.id, bidder)


def test_after_end(make_auction, bidder):
    auction = make_auction(buy_now_price=Decimal('1000000'),
                           end_time=timezone.now() - timedelta(seconds=1))

    with pytest.raises(AuctionEnded):
        services.buy_now(auction.id, bidder)


@pytest.mark.parametrize('status', [AuctionStatus.ENDED, AuctionStatus.SOLD, AuctionStatus.CANCELLED])
def test_closed_statuses_refuse_purchase(make_auction, bidder, status):
    auction = make_auction(buy_now_price=Decimal('1000000'), status=status)

    with pytest.raises(AuctionNotAcceptingPurchases):
        services.buy_now(auction.id, bidder)


def test_purchase_sells_the_auction(buyable_auction, bidder, rival):
    services.place_bid(buyable_auction.id, rival, Decimal('850000'))
    original_end = buyable_auction.end_time
    now = timezone.now()

    result = services.buy_now(buyable_auction.id, bidder, ip_address='10.1.1.1', user_agent='ua', now=now)

    assert result['success'] is True
    assert result['auction'] == {'status': 'sold', 'finalPrice': Decimal('1000000'), 'winner': bidder.id}
    assert result['purchase']['amount'] == Decimal('1000000')
    assert result['purchase']['commission'] == Decimal('24000.00')
    assert result['purchase']['platformShare'] == Decimal('10000.00')
    assert result['purchase']['developerShare'] == Decimal('14000.00')
    assert result['purchase']['platformFee'] == Decimal('10000.00')

    buyable_auction.refresh_from_db()
    assert buyable_auction.status == AuctionStatus.SOLD
    assert buyable_auction.current_bid == Decimal('1000000')
    assert buyable_auction.bid_count == 2
    assert buyable_auction.end_time == now
    assert buyable_auction.end_time < original_end

    purchase = Bid.objects.get(pk=result['purchase']['id'])
    assert purchase.is_winning
    assert purchase.status == BidStatus.WINNING
    assert purchase.ip_address == '10.1.1.1'

    earlier = Bid.objects.get(user=rival)
    assert not earlier.is_winning
    assert earlier.status == BidStatus.OUTBID


def test_purchase_records_winner_with_premium(buyable_auction, bidder):
    services.buy_now(buyable_auction.id, bidder)

    winner = AuctionWinner.objects.get(auction_property=buyable_auction)
    assert winner.user == bidder
    assert winner.winning_bid == Decimal('1000000')
    assert winner.final_price == Decimal('1010000')
    assert winner.commission_amount == Decimal('24000')
    assert winner.developer_share == Decimal('14000')
    assert winner.platform_share == Decimal('10000')

    event = AuctionEvent.objects.get(event_type=AuctionEventType.BUY_NOW_PURCHASE)
    assert event.event_data['user_id'] == bidder.id
    assert Decimal(event.event_data['purchase_price']) == Decimal('1000000')


def test_purchase_during_preview(make_auction, bidder):
    now = timezone.now()
    auction = make_auction(
        status=AuctionStatus.PREVIEW,
        buy_now_price=Decimal('1000000'),
        reserve_price=Decimal('800000'),
        preview_start=now - timedelta(hours=1),
        start_time=now + timedelta(days=1),
        end_time=now + timedelta(days=2),
    )

    services.buy_now(auction.id, bidder)

    auction.refresh_from_db()
    assert auction.status == AuctionStatus.SOLD


def test_second_purchase_is_refused(buyable_auction, bidder, rival):
    services.buy_now(buyable_auction.id, bidder)

    with pytest.raises((AuctionNotAcceptingPurchases, AuctionEnded)):
        services.buy_now(buyable_auction.id, rival)
    assert AuctionWinner.objects.count() == 1


def test_failure_leaves_nothing_behind(buyable_auction, bidder, rival):
    services.place_bid(buyable_auction.id, rival, Decimal('850000'))

    with mock.patch.object(AuctionWinner.objects, 'create', side_effect=DatabaseError('boom')):
        with pytest.raises(PurchaseError):
            services.buy_now(buyable_auction.id, bidder)

    buyable_auction.refresh_from_db()
    assert buyable_auction.status == AuctionStatus.LIVE
    assert buyable_auction.bid_count == 1
    assert buyable_auction.current_bid == Decimal('850000')
    assert Bid.objects.count() == 1
    assert Bid.objects.get().is_winning
    assert not AuctionEvent.objects.filter(event_type=AuctionEventType.BUY_NOW_PURCHASE).exists()


def test_buyer_and_outbid_bidders_are_notified(buyable_auction, bidder, rival, django_capture_on_commit_callbacks):
    services.place_bid(buyable_auction.id, rival, Decimal('850000'))

    with mock.patch('auctions.services.broadcast_auction_update') as broadcast:
        with django_capture_on_commit_callbacks(execute=True):
            services.buy_now(buyable_auction.id, bidder)

    assert Notification.objects.get(user=bidder).notification_type == 'auction_bought'
    assert Notification.objects.get(user=rival).notification_type == 'auction_outbid'
    auction_id, event, data = broadcast.call_args.args
    assert (auction_id, event) == (buyable_auction.id, 'auction_sold')
    assert data['finalPrice'] == 1000000.0
    assert data['winner'] == bidder.id
