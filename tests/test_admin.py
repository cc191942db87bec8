import pytest
from django.test import Client

pytestmark = pytest.mark.django_db


@pytest.fixture
def staff_client(settings, django_user_model, live_auction):
    settings.STORAGES = {
        **settings.STORAGES,
        'staticfiles': {'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage'},
    }
    superuser = django_user_model.objects.create_superuser(
        email='root@example.com', password='Str0ng-passw0rd!', first_name='Root', last_name='Admin',
    )
    client = Client()
    client.force_login(superuser)
    return client


@pytest.mark.parametrize('url', [
    '/admin/auctions/auctionproperty/',
    '/admin/auctions/auctionwinner/',
    '/admin/auctions/auctionevent/',
    '/admin/properties/property/',
    '/admin/accounts/user/',
])
def test_changelists_render(staff_client, url):
    assert staff_client.get(url).status_code == 200


def test_auction_change_page_shows_bids(staff_client, live_auction):
    response = staff_client.get(f'/admin/auctions/auctionproperty/{live_auction.id}/change/')

    assert response.status_code == 200
    assert b'Pricing' in response.content
