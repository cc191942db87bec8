from rest_framework import serializers
from .models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    auction_id = serializers.IntegerField(source='object_id', read_only=True)
    message = serializers.SerializerMethodField()

    class Meta:
        model = Notification
        fields = [
            'id', 'notification_type', 'message', 'message_ar', 'message_en',
            'auction_id', 'extra_data', 'is_read', 'read_at', 'created_at',
        ]
        read_only_fields = fields

    def get_message(self, obj):
        return obj.message(self.context.get('language', 'en'))
