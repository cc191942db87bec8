# auctions/consumers.py
import json

from channels.generic.websocket import AsyncJsonWebsocketConsumer
from django.core.serializers.json import DjangoJSONEncoder

from .utils import auction_group_name


class AuctionConsumer(AsyncJsonWebsocketConsumer):
    """Read-only feed of bid and sale updates for one auction."""

    async def connect(self):
        self.auction_id = self.scope['url_route']['kwargs']['auction_id']
        self.group_name = auction_group_name(self.auction_id)
        await self.channel_layer.group_add(self.group_name, self.channel_name)
        await self.accept()

    async def disconnect(self, code):
        await self.channel_layer.group_discard(self.group_name, self.channel_name)

    async def auction_update(self, message):
        await self.send_json({
            'event': message['event'],
            'data': message['data'],
        })

    @classmethod
    async def encode_json(cls, content):
        return json.dumps(content, cls=DjangoJSONEncoder)
