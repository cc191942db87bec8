import pytest

from notifications.models import Notification
from notifications.utils import send_auction_notification

pytestmark = pytest.mark.django_db


@pytest.fixture
def notifications(bidder, rival, live_auction):
    return [
        send_auction_notification(bidder, live_auction, 'auction_outbid', amount=61000),
        send_auction_notification(bidder, live_auction, 'auction_won', amount=90000),
        send_auction_notification(rival, live_auction, 'auction_bought', amount=100000),
    ]


def test_notification_is_bilingual_and_linked(bidder, live_auction):
    notification = send_auction_notification(bidder, live_auction, 'auction_ended_no_sale')

    assert notification.content_object == live_auction
    assert f'#{live_auction.id}' in notification.message_en
    assert notification.message_ar
    assert notification.extra_data == {'auction_id': live_auction.id, 'amount': None}


def test_list_only_own_notifications(bidder_client, notifications):
    response = bidder_client.get('/api/notifications/')

    assert response.status_code == 200
    body = response.json()
    assert body['count'] == 2
    assert {n['notification_type'] for n in body['results']} == {'auction_outbid', 'auction_won'}


def test_filter_by_type(bidder_client, notifications):
    body = bidder_client.get('/api/notifications/', {'type': 'auction_won'}).json()

    assert body['count'] == 1


def test_mark_as_read_and_unread_count(bidder_client, notifications):
    assert bidder_client.get('/api/notifications/unread-count/').json() == {'unread_count': 2}

    response = bidder_client.post(f'/api/notifications/{notifications[0].id}/read/')

    assert response.status_code == 200
    assert response.json()['status'] == 'marked as read'
    assert response.json()['read_at'] is not None
    assert bidder_client.get('/api/notifications/unread-count/').json() == {'unread_count': 1}
    assert bidder_client.get('/api/notifications/', {'is_read': 'true'}).json()['count'] == 1


def test_cannot_read_someone_elses_notification(bidder_client, notifications):
    response = bidder_client.post(f'/api/notifications/{notifications[2].id}/read/')

    assert response.status_code == 404
    assert not Notification.objects.get(pk=notifications[2].id).is_read


def test_notifications_require_authentication(api_client):
    assert api_client.get('/api/notifications/').status_code == 401


def test_mark_all_as_read(bidder_client, bidder, notifications):
    response = bidder_client.post('/api/notifications/read-all/')

    assert response.json() == {'updated': 2}
    assert not bidder.get_unread_notifications().exists()
    assert Notification.objects.filter(user=bidder, read_at__isnull=False).count() == 2


def test_filter_by_auction(bidder_client, bidder, notifications, make_auction):
    other = make_auction()
    send_auction_notification(bidder, other, 'auction_outbid', amount=70000)

    body = bidder_client.get('/api/notifications/', {'auction': other.id}).json()

    assert body['count'] == 1
    assert body['results'][0]['auction_id'] == other.id


def test_message_follows_accept_language(bidder_client, notifications):
    english = bidder_client.get('/api/notifications/').json()['results'][0]
    arabic = bidder_client.get('/api/notifications/', HTTP_ACCEPT_LANGUAGE='ar-EG').json()['results'][0]

    assert english['message'] == english['message_en']
    assert arabic['message'] == arabic['message_ar']
