from django.contrib import admin
from .models import AuctionProperty, Bid, AuctionWinner, AuctionEvent


class BidInline(admin.TabularInline):
    model = Bid
    extra = 0
    fields = ('user', 'amount', 'bid_time', 'is_winning', 'status')
    readonly_fields = fields
    can_delete = False


@admin.register(AuctionProperty)
class AuctionPropertyAdmin(admin.ModelAdmin):
    list_display = ('id', 'listed_property', 'status', 'start_time', 'end_time', 'current_bid', 'bid_count')
    list_filter = ('status', 'auction_type')
    raw_id_fields = ('listed_property',)
    readonly_fields = ('current_bid', 'bid_count', 'created_at', 'updated_at')
    inlines = [BidInline]

    fieldsets = (
        (None, {
            'fields': ('listed_property', 'auction_type', 'status')
        }),
        ('Dates', {
            'fields': ('preview_start', 'start_time', 'end_time')
        }),
        ('Pricing', {
            'fields': ('reserve_price', 'buy_now_price', 'commission_rate', 'current_bid', 'bid_count')
        }),
        ('Metadata', {
            'fields': ('created_at', 'updated_at')
        }),
    )


@admin.register(AuctionWinner)
class AuctionWinnerAdmin(admin.ModelAdmin):
    list_display = ('auction_property', 'user', 'winning_bid', 'final_price', 'commission_amount', 'payment_status')
    list_filter = ('payment_status',)
    raw_id_fields = ('auction_property', 'user')


@admin.register(AuctionEvent)
class AuctionEventAdmin(admin.ModelAdmin):
    list_display = ('auction_property', 'event_type', 'created_at')
    list_filter = ('event_type',)
    readonly_fields = ('auction_property', 'event_type', 'event_data', 'created_at')

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
