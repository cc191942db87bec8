# auctions/models.py
from datetime import timedelta
from decimal import Decimal

from django.db import models
from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder
from django.core.validators import MinValueValidator, MaxValueValidator
from django.utils import timezone
from properties.models import Property


class AuctionStatus(models.TextChoices):
    PREVIEW = 'preview', 'Preview'      # visible, bidding not open yet
    LIVE = 'live', 'Live'
    ENDED = 'ended', 'Ended'
    SOLD = 'sold', 'Sold'
    CANCELLED = 'cancelled', 'Cancelled'


class AuctionType(models.TextChoices):
    LIVE = 'live', 'Live'
    TIMED = 'timed', 'Timed'


class AuctionPhase(models.TextChoices):
    PREVIEW = 'preview', 'Preview'
    LIVE = 'live', 'Live'
    ENDED = 'ended', 'Ended'


class AuctionProperty(models.Model):
    listed_property = models.ForeignKey(
        Property,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='auctions',
        db_column='property_id'
    )
    auction_type = models.CharField(max_length=10, choices=AuctionType.choices, default=AuctionType.LIVE)

    preview_start = models.DateTimeField()
    start_time = models.DateTimeField()
    end_time = models.DateTimeField()

    reserve_price = models.DecimalField(max_digits=14, decimal_places=2, validators=[MinValueValidator(Decimal('0.01'))])
    buy_now_price = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    current_bid = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    bid_count = models.PositiveIntegerField(default=0)

    status = models.CharField(max_length=20, choices=AuctionStatus.choices, default=AuctionStatus.PREVIEW)
    commission_rate = models.DecimalField(
        max_digits=5,
        decimal_places=4,
        default=Decimal('0.05'),
        validators=[MinValueValidator(Decimal('0')), MaxValueValidator(Decimal('1'))]
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'auction_properties'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status', 'start_time'], name='auction_status_start_idx'),
            models.Index(fields=['status', 'end_time'], name='auction_status_end_idx'),
        ]

    def __str__(self):
        title = self.listed_property.title if self.listed_property_id else 'Auction'
        return f"{title} (#{self.id})"

    @property
    def is_reserve_met(self):
        return self.bid_count > 0 and self.current_bid >= self.reserve_price

    @property
    def is_live(self):
        now = timezone.now()
        return self.status == AuctionStatus.LIVE and self.start_time <= now <= self.end_time

    def phase(self, now=None):
        """Wall-clock phase; independent of the stored status. Bids are taken up to and including ``end_time``."""
        now = now or timezone.now()
        if now < self.start_time:
            return AuctionPhase.PREVIEW
        if now <= self.end_time:
            return AuctionPhase.LIVE
        return AuctionPhase.ENDED

    def time_remaining(self, now=None) -> timedelta:
        """Time until the next phase boundary (zero once ended)."""
        now = now or timezone.now()
        if now < self.preview_start:
            return self.preview_start - now
        if now < self.start_time:
            return self.start_time - now
        if now < self.end_time:
            return self.end_time - now
        return timedelta(0)


class BidStatus(models.TextChoices):
    ACTIVE = 'active', 'Active'
    OUTBID = 'outbid', 'Outbid'
    WINNING = 'winning', 'Winning'
    CANCELLED = 'cancelled', 'Cancelled'


class Bid(models.Model):
    auction_property = models.ForeignKey(AuctionProperty, on_delete=models.CASCADE, related_name='bids')
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='bids')
    amount = models.DecimalField(max_digits=14, decimal_places=2, validators=[MinValueValidator(Decimal('0.01'))])
    # stored for the client; automatic re-bidding is not performed
    auto_bid_max = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    bid_time = models.DateTimeField(default=timezone.now)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.TextField(blank=True)
    is_winning = models.BooleanField(default=False)
    status = models.CharField(max_length=20, choices=BidStatus.choices, default=BidStatus.ACTIVE)

    class Meta:
        db_table = 'bids'
        ordering = ['-bid_time', '-id']
        indexes = [
            models.Index(fields=['auction_property', '-bid_time'], name='bid_auction_time_idx'),
            models.Index(fields=['auction_property', 'is_winning'], name='bid_auction_winning_idx'),
        ]

    def __str__(self):
        return f"Bid {self.amount} on {self.auction_property_id} by {self.user_id}"


class PaymentStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    PAID = 'paid', 'Paid'
    FAILED = 'failed', 'Failed'
    REFUNDED = 'refunded', 'Refunded'


class AuctionWinner(models.Model):
    auction_property = models.OneToOneField(AuctionProperty, on_delete=models.CASCADE, related_name='winner')
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='won_auctions')
    winning_bid = models.DecimalField(max_digits=14, decimal_places=2)
    final_price = models.DecimalField(max_digits=14, decimal_places=2)
    commission_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    developer_share = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    platform_share = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    payment_status = models.CharField(max_length=20, choices=PaymentStatus.choices, default=PaymentStatus.PENDING)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'auction_winners'

    def __str__(self):
        return f"Winner of {self.auction_property_id}: {self.user_id} ({self.final_price})"


class AuctionEventType(models.TextChoices):
    AUCTION_CREATED = 'auction_created', 'Auction Created'
    AUCTION_UPDATED = 'auction_updated', 'Auction Updated'
    AUCTION_STARTED = 'auction_started', 'Auction Started'
    AUCTION_ENDED = 'auction_ended', 'Auction Ended'
    BID_PLACED = 'bid_placed', 'Bid Placed'
    BUY_NOW_PURCHASE = 'buy_now_purchase', 'Buy Now Purchase'


class AuctionEvent(models.Model):
    """Append-only audit log of what happened to an auction."""
    auction_property = models.ForeignKey(AuctionProperty, on_delete=models.CASCADE, related_name='events')
    event_type = models.CharField(max_length=30, choices=AuctionEventType.choices)
    event_data = models.JSONField(default=dict, blank=True, encoder=DjangoJSONEncoder)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'auction_events'
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f"{self.event_type} on {self.auction_property_id}"
