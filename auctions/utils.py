# auctions/utils.py
import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.core.exceptions import ValidationError
from django.core.validators import validate_ipv46_address

logger = logging.getLogger(__name__)


def get_client_ip(request):
    """First hop of X-Forwarded-For, then X-Real-IP, then loopback."""
    forwarded_for = request.headers.get('x-forwarded-for', '')
    first_hop = forwarded_for.split(',')[0].strip()
    ip_address = first_hop or request.headers.get('x-real-ip', '').strip() or '127.0.0.1'
    try:
        validate_ipv46_address(ip_address)
    except ValidationError:
        logger.warning("Ignoring malformed client address %r", ip_address)
        return None
    return ip_address


def get_user_agent(request):
    return request.headers.get('user-agent', '')


def auction_group_name(auction_id):
    return f'auction_{auction_id}'


def broadcast_auction_update(auction_id, event, data):
    """Push an update to every socket watching ``auction_id``."""
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return
    async_to_sync(channel_layer.group_send)(
        auction_group_name(auction_id),
        {
            'type': 'auction_update',
            'event': event,
            'data': data,
        }
    )
    logger.debug("Broadcast %s for auction %s", event, auction_id)
