from datetime import timedelta
from decimal import Decimal
from io import StringIO
from unittest import mock

import pytest
from django.core.management import call_command
from django.utils import timezone

from auctions import services
from auctions.models import (
    AuctionPhase, AuctionStatus, AuctionWinner, AuctionEvent, AuctionEventType, Bid, BidStatus,
)
from auctions.tasks import activate_due_auctions_task, close_due_auctions_task
from notifications.models import Notification

pytestmark = pytest.mark.django_db


def _due_preview(make_auction):
    now = timezone.now()
    return make_auction(
        status=AuctionStatus.PREVIEW,
        preview_start=now - timedelta(days=1),
        start_time=now - timedelta(minutes=5),
        end_time=now + timedelta(hours=2),
    )


def test_due_preview_goes_live(make_auction):
    auction = _due_preview(make_auction)
    upcoming = make_auction(
        status=AuctionStatus.PREVIEW,
        start_time=timezone.now() + timedelta(hours=1),
        end_time=timezone.now() + timedelta(hours=2),
    )

    assert services.activate_due_auctions() == 1

    auction.refresh_from_db()
    upcoming.refresh_from_db()
    assert auction.status == AuctionStatus.LIVE
    assert upcoming.status == AuctionStatus.PREVIEW
    assert AuctionEvent.objects.filter(
        auction_property=auction, event_type=AuctionEventType.AUCTION_STARTED
    ).count() == 1


def test_activation_is_idempotent(make_auction):
    auction = _due_preview(make_auction)

    assert services.activate_if_due(auction.id) is True
    assert services.activate_if_due(auction.id) is False
    assert AuctionEvent.objects.filter(event_type=AuctionEventType.AUCTION_STARTED).count() == 1


def _expired(make_auction, **overrides):
    now = timezone.now()
    fields = {
        'start_time': now - timedelta(hours=3),
        'end_time': now - timedelta(minutes=1),
    }
    fields.update(overrides)
    return make_auction(**fields)


def test_close_with_reserve_met_creates_winner(make_auction, bidder, django_capture_on_commit_callbacks):
    auction = _expired(make_auction, reserve_price=Decimal('800000'), current_bid=Decimal('900000'), bid_count=1)
    bid = Bid.objects.create(
        auction_property=auction, user=bidder, amount=Decimal('900000'),
        bid_time=auction.end_time - timedelta(minutes=10), is_winning=True,
    )

    with django_capture_on_commit_callbacks(execute=True):
        result = services.close_auction(auction.id)

    assert result == {'status': 'ended_sold', 'winner_id': bidder.id}
    auction.refresh_from_db()
    assert auction.status == AuctionStatus.ENDED

    winner = AuctionWinner.objects.get(auction_property=auction)
    assert winner.user == bidder
    assert winner.final_price == Decimal('900000')
    # 100000 over reserve: 5% platform + 7% developer
    assert winner.commission_amount == Decimal('12000')

    bid.refresh_from_db()
    assert bid.status == BidStatus.WINNING
    assert Notification.objects.get(user=bidder).notification_type == 'auction_won'

    event = AuctionEvent.objects.get(event_type=AuctionEventType.AUCTION_ENDED)
    assert event.event_data['reserve_met'] is True
    assert event.event_data['winner_id'] == bidder.id


def test_close_without_bids(make_auction):
    auction = _expired(make_auction)

    assert services.close_auction(auction.id) == {'status': 'ended_no_sale'}

    auction.refresh_from_db()
    assert auction.status == AuctionStatus.ENDED
    assert not AuctionWinner.objects.exists()


def test_close_below_raised_reserve_notifies_leader(make_auction, bidder, django_capture_on_commit_callbacks):
    auction = _expired(make_auction, reserve_price=Decimal('950000'), current_bid=Decimal('900000'), bid_count=1)
    Bid.objects.create(auction_property=auction, user=bidder, amount=Decimal('900000'), is_winning=True,
                       bid_time=auction.end_time - timedelta(minutes=5))

    with django_capture_on_commit_callbacks(execute=True):
        result = services.close_auction(auction.id)

    assert result == {'status': 'ended_no_sale'}
    assert not AuctionWinner.objects.exists()
    assert Notification.objects.get(user=bidder).notification_type == 'auction_ended_no_sale'


def test_close_skips_running_and_sold_auctions(make_auction):
    running = make_auction()
    sold = _expired(make_auction, status=AuctionStatus.SOLD)

    assert services.close_auction(running.id) == {'status': 'skipped'}
    assert services.close_auction(sold.id) == {'status': 'skipped'}
    assert services.close_due_auctions() == 0


def test_close_due_auctions_counts_closed(make_auction):
    _expired(make_auction)
    _expired(make_auction, status=AuctionStatus.PREVIEW)
    make_auction()

    assert services.close_due_auctions() == 2
    assert services.close_due_auctions() == 0


def test_celery_tasks_run_lifecycle(make_auction):
    _due_preview(make_auction)
    _expired(make_auction)

    assert activate_due_auctions_task() == 1
    assert close_due_auctions_task() == 1


def test_process_auctions_command(make_auction):
    due = _due_preview(make_auction)
    expired = _expired(make_auction)
    out = StringIO()

    call_command('process_auctions', stdout=out)

    due.refresh_from_db()
    expired.refresh_from_db()
    assert due.status == AuctionStatus.LIVE
    assert expired.status == AuctionStatus.ENDED
    assert 'Activated 1' in out.getvalue()
    assert 'closed 1' in out.getvalue()


def test_phase_and_time_remaining(make_auction):
    now = timezone.now()
    auction = make_auction(
        preview_start=now + timedelta(hours=1),
        start_time=now + timedelta(hours=2),
        end_time=now + timedelta(hours=3),
    )

    assert auction.phase(now) == AuctionPhase.PREVIEW
    assert auction.time_remaining(now) == timedelta(hours=1)
    assert auction.time_remaining(now + timedelta(minutes=90)) == timedelta(minutes=30)
    assert auction.phase(now + timedelta(minutes=150)) == AuctionPhase.LIVE
    assert auction.time_remaining(now + timedelta(minutes=150)) == timedelta(minutes=30)
    assert auction.phase(now + timedelta(hours=3)) == AuctionPhase.LIVE
    assert auction.phase(now + timedelta(hours=3, microseconds=1)) == AuctionPhase.ENDED
    assert auction.time_remaining(now + timedelta(hours=4)) == timedelta(0)


def test_close_survives_failing_winner_notification(make_auction, bidder, django_capture_on_commit_callbacks):
    auction = _expired(make_auction, reserve_price=Decimal('800000'), current_bid=Decimal('900000'), bid_count=1)
    Bid.objects.create(auction_property=auction, user=bidder, amount=Decimal('900000'), is_winning=True,
                       bid_time=auction.end_time - timedelta(minutes=5))

    with mock.patch('auctions.services.send_auction_notification', side_effect=RuntimeError('notify down')):
        with django_capture_on_commit_callbacks(execute=True) as callbacks:
            result = services.close_auction(auction.id)

    assert len(callbacks) == 1
    assert result['status'] == 'ended_sold'
    assert AuctionWinner.objects.filter(auction_property=auction).exists()
