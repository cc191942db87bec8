from django.db import models
from django.conf import settings
from django.contrib.contenttypes.fields import GenericForeignKey
from django.contrib.contenttypes.models import ContentType
from django.core.serializers.json import DjangoJSONEncoder
from django.utils import timezone


class NotificationType(models.TextChoices):
    AUCTION_OUTBID = 'auction_outbid', 'Outbid'
    AUCTION_WON = 'auction_won', 'Auction Won'
    AUCTION_BOUGHT = 'auction_bought', 'Bought Now'
    AUCTION_ENDED_NO_SALE = 'auction_ended_no_sale', 'Ended Without Sale'
    SYSTEM_ALERT = 'system_alert', 'System Alert'


class Notification(models.Model):
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='user_notifications'
    )
    notification_type = models.CharField(max_length=30, choices=NotificationType.choices)
    message_ar = models.TextField()
    message_en = models.TextField()
    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)
    extra_data = models.JSONField(null=True, blank=True, encoder=DjangoJSONEncoder)

    # the auction the notification is about
    content_type = models.ForeignKey(ContentType, on_delete=models.CASCADE, null=True, blank=True)
    object_id = models.PositiveIntegerField(null=True, blank=True)
    content_object = GenericForeignKey('content_type', 'object_id')

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'notifications'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['user', 'is_read'], name='notification_user_read_idx'),
        ]

    def __str__(self):
        return f"{self.notification_type} for {self.user_id}"

    def message(self, language='en'):
        return self.message_ar if language == 'ar' else self.message_en

    def mark_as_read(self):
        if not self.is_read:
            self.is_read = True
            self.read_at = timezone.now()
            self.save(update_fields=['is_read', 'read_at'])
