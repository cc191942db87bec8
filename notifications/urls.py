from django.urls import path
from .views import NotificationListView, MarkAsReadView, MarkAllAsReadView, UnreadCountView

urlpatterns = [
    path('', NotificationListView.as_view(), name='notification-list'),
    path('<int:notification_id>/read/', MarkAsReadView.as_view(), name='notification-read'),
    path('read-all/', MarkAllAsReadView.as_view(), name='notification-read-all'),
    path('unread-count/', UnreadCountView.as_view(), name='notification-unread-count'),
]
