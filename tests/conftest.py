"""
Shared pytest fixtures: users, properties, auctions and API clients.
"""
from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from accounts.models import User, Role
from accounts.utils import create_session_token
from auctions.models import AuctionProperty, AuctionStatus
from properties.models import Property


@pytest.fixture(autouse=True)
def _plain_http(settings):
    """The test client speaks plain HTTP."""
    settings.SECURE_SSL_REDIRECT = False


# =============================================================================
# Users
# =============================================================================


def _create_user(email, role=Role.USER):
    username = email.split('@')[0]
    return User.objects.create_user(
        email=email,
        password='Str0ng-passw0rd!',
        username=username,
        first_name=username.title(),
        last_name='Tester',
        role=role,
    )


@pytest.fixture
def bidder(db):
    return _create_user('bidder@example.com')


@pytest.fixture
def rival(db):
    return _create_user('rival@example.com')


@pytest.fixture
def admin_user(db):
    return _create_user('admin@example.com', role=Role.ADMIN)


# =============================================================================
# Auctions
# =============================================================================


@pytest.fixture
def listed_property(db):
    return Property.objects.create(
        title='Sea view villa',
        address='North Coast, km 120',
        city='Alamein',
        property_type='villa',
        bedrooms=4,
        bathrooms=3,
        square_meters=320,
        price=Decimal('900000'),
    )


@pytest.fixture
def make_auction(db, listed_property):
    """Factory for auctions; defaults to a live auction that ends in an hour."""
    def _make(**overrides):
        now = timezone.now()
        fields = {
            'listed_property': listed_property,
            'preview_start': now - timedelta(days=2),
            'start_time': now - timedelta(hours=1),
            'end_time': now + timedelta(hours=1),
            'reserve_price': Decimal('50000'),
            'buy_now_price': None,
            'current_bid': Decimal('0'),
            'bid_count': 0,
            'status': AuctionStatus.LIVE,
            'commission_rate': Decimal('0.05'),
        }
        fields.update(overrides)
        return AuctionProperty.objects.create(**fields)
    return _make


@pytest.fixture
def live_auction(make_auction):
    return make_auction()


# =============================================================================
# API clients
# =============================================================================


@pytest.fixture
def api_client():
    return APIClient()


def _client_for(user):
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {create_session_token(user)}')
    return client


@pytest.fixture
def bidder_client(bidder):
    return _client_for(bidder)


@pytest.fixture
def rival_client(rival):
    return _client_for(rival)


@pytest.fixture
def admin_client(admin_user):
    return _client_for(admin_user)
