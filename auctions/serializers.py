from decimal import Decimal

from django.utils import timezone
from rest_framework import serializers

from properties.models import Property
from properties.serializers import PropertySummarySerializer
from .models import AuctionProperty, AuctionStatus, AuctionEvent, AuctionEventType, Bid


def check_schedule_and_prices(values):
    """Cross-field rules shared by auction create and update."""
    preview_start = values.get('preview_start')
    start_time = values.get('start_time')
    end_time = values.get('end_time')
    reserve_price = values.get('reserve_price')
    buy_now_price = values.get('buy_now_price')

    if start_time and end_time and end_time <= start_time:
        raise serializers.ValidationError("end_time must be after start_time.")
    if preview_start and start_time and preview_start > start_time:
        raise serializers.ValidationError("preview_start must not be after start_time.")
    if buy_now_price and reserve_price and buy_now_price <= reserve_price:
        raise serializers.ValidationError("Buy now price must be greater than reserve price.")


class AuctionCreateSerializer(serializers.ModelSerializer):
    property_id = serializers.IntegerField(write_only=True)

    class Meta:
        model = AuctionProperty
        fields = [
            'id', 'property_id', 'auction_type',
            'preview_start', 'start_time', 'end_time',
            'reserve_price', 'buy_now_price', 'commission_rate',
        ]

    def validate_property_id(self, value):
        if not Property.objects.filter(pk=value).exists():
            raise serializers.ValidationError("Property not found.")
        return value

    def validate_start_time(self, value):
        if value <= timezone.now():
            raise serializers.ValidationError("Start time must be in the future.")
        return value

    def validate_reserve_price(self, value):
        if value <= 0:
            raise serializers.ValidationError("Reserve price must be greater than 0.")
        return value

    def validate_commission_rate(self, value):
        if value < 0 or value > 1:
            raise serializers.ValidationError("Commission rate must be between 0 and 100%.")
        return value

    def validate(self, data):
        check_schedule_and_prices(data)
        return data

    def create(self, validated_data):
        property_id = validated_data.pop('property_id')
        auction = AuctionProperty.objects.create(
            listed_property_id=property_id,
            status=AuctionStatus.PREVIEW,
            **validated_data
        )
        AuctionEvent.objects.create(
            auction_property=auction,
            event_type=AuctionEventType.AUCTION_CREATED,
            event_data={
                'property_id': property_id,
                'reserve_price': auction.reserve_price,
                'buy_now_price': auction.buy_now_price,
                'start_time': auction.start_time,
                'end_time': auction.end_time,
            },
        )
        return auction


class AuctionUpdateSerializer(serializers.ModelSerializer):
    property_id = serializers.PrimaryKeyRelatedField(
        source='listed_property', queryset=Property.objects.all(), required=False
    )
    # live, ended and sold are reached only through the timer and buy now
    status = serializers.ChoiceField(choices=[AuctionStatus.CANCELLED], required=False)

    class Meta:
        model = AuctionProperty
        fields = [
            'property_id', 'auction_type', 'status',
            'preview_start', 'start_time', 'end_time',
            'reserve_price', 'buy_now_price', 'commission_rate',
        ]

    def validate_status(self, value):
        if self.instance and self.instance.status in (AuctionStatus.ENDED, AuctionStatus.SOLD):
            raise serializers.ValidationError("A closed auction cannot be cancelled.")
        return value

    def validate_commission_rate(self, value):
        if value < 0 or value > 1:
            raise serializers.ValidationError("Commission rate must be between 0 and 100%.")
        return value

    def validate(self, data):
        merged = {
            field: data[field] if field in data else getattr(self.instance, field)
            for field in ('preview_start', 'start_time', 'end_time', 'reserve_price', 'buy_now_price')
        }
        check_schedule_and_prices(merged)
        return data


class BidHistorySerializer(serializers.ModelSerializer):
    class Meta:
        model = Bid
        fields = ['id', 'amount', 'bid_time', 'is_winning', 'status']


class AuctionEventSerializer(serializers.ModelSerializer):
    class Meta:
        model = AuctionEvent
        fields = ['id', 'event_type', 'event_data', 'created_at']


class AuctionListSerializer(serializers.ModelSerializer):
    property = PropertySummarySerializer(source='listed_property', read_only=True)
    is_reserve_met = serializers.BooleanField(read_only=True)

    class Meta:
        model = AuctionProperty
        fields = [
            'id', 'auction_type', 'status',
            'preview_start', 'start_time', 'end_time',
            'reserve_price', 'buy_now_price', 'current_bid', 'bid_count',
            'commission_rate', 'is_reserve_met', 'created_at',
            'property',
        ]


class AuctionDetailSerializer(AuctionListSerializer):
    bids = serializers.SerializerMethodField()
    events = serializers.SerializerMethodField()
    phase = serializers.SerializerMethodField()
    timeRemaining = serializers.SerializerMethodField()
    secondsRemaining = serializers.SerializerMethodField()

    class Meta(AuctionListSerializer.Meta):
        fields = AuctionListSerializer.Meta.fields + [
            'updated_at', 'bids', 'events', 'phase', 'timeRemaining', 'secondsRemaining',
        ]

    def _now(self):
        return self.context.get('now') or timezone.now()

    def get_bids(self, obj):
        return BidHistorySerializer(obj.bids.order_by('-bid_time', '-id')[:10], many=True).data

    def get_events(self, obj):
        return AuctionEventSerializer(obj.events.order_by('-created_at', '-id')[:20], many=True).data

    def get_phase(self, obj):
        return obj.phase(self._now()).value

    def get_timeRemaining(self, obj):
        return int(obj.time_remaining(self._now()).total_seconds() * 1000)

    def get_secondsRemaining(self, obj):
        return max(0, int(obj.time_remaining(self._now()).total_seconds()))


class PlaceBidSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    auto_bid_max = serializers.DecimalField(max_digits=14, decimal_places=2, required=False, allow_null=True)

    def validate_amount(self, value):
        if value <= Decimal('0'):
            raise serializers.ValidationError("Invalid bid amount")
        return value
