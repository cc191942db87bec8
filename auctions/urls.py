# auctions/urls.py
from django.urls import path
from .views import (
    AuctionListCreateView, AuctionDetailView, PlaceBidView, BuyNowView,
)

urlpatterns = [
    path('', AuctionListCreateView.as_view(), name='auction-list'),
    path('<int:pk>/', AuctionDetailView.as_view(), name='auction-detail'),

    # bidding
    path('<int:pk>/bid/', PlaceBidView.as_view(), name='auction-bid'),
    path('<int:pk>/buy-now/', BuyNowView.as_view(), name='auction-buy-now'),
]
