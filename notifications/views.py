# notifications/views.py
import logging

from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.pagination import PageNumberPagination
from django.shortcuts import get_object_or_404

from .models import Notification
from .serializers import NotificationSerializer

logger = logging.getLogger(__name__)


def preferred_language(request):
    """'ar' when the client asks for Arabic, English otherwise."""
    accept = request.headers.get('accept-language', '')
    return 'ar' if accept.lower().startswith('ar') else 'en'


class NotificationPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class NotificationListView(APIView):
    """
    The caller's notifications, newest first.

    Query params: ``is_read`` (true/false), ``type`` and ``auction``.
    """
    permission_classes = [IsAuthenticated]
    pagination_class = NotificationPagination

    def get(self, request):
        qs = request.user.user_notifications.all()

        is_read = request.query_params.get('is_read')
        if is_read is not None:
            qs = qs.filter(is_read=is_read.lower() == 'true')

        notification_type = request.query_params.get('type')
        if notification_type:
            qs = qs.filter(notification_type=notification_type)

        auction_id = request.query_params.get('auction')
        if auction_id and auction_id.isdigit():
            qs = qs.filter(object_id=int(auction_id))

        paginator = self.pagination_class()
        page = paginator.paginate_queryset(qs, request, view=self)
        ser = NotificationSerializer(page, many=True, context={'language': preferred_language(request)})
        return paginator.get_paginated_response(ser.data)


class MarkAsReadView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, notification_id):
        notification = get_object_or_404(Notification, id=notification_id, user=request.user)
        notification.mark_as_read()
        return Response({
            'status': 'marked as read',
            'read_at': notification.read_at,
        }, status=status.HTTP_200_OK)


class MarkAllAsReadView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        updated = request.user.mark_all_notifications_read()
        logger.debug("User %s marked %s notifications read", request.user.id, updated)
        return Response({'updated': updated})


class UnreadCountView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response({'unread_count': request.user.get_unread_notifications().count()})
