# auctions/views.py
import logging

from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from rest_framework import permissions, status
from django.shortcuts import get_object_or_404
from django.db import transaction

from accounts.permissionsUsers import IsSuperAdminOrAdmin
from .models import AuctionProperty, AuctionStatus, AuctionEvent, AuctionEventType
from .exceptions import AuctionError, InvalidAmount
from .serializers import (
    AuctionCreateSerializer, AuctionUpdateSerializer, AuctionListSerializer,
    AuctionDetailSerializer, PlaceBidSerializer, BidHistorySerializer,
)
from .services import place_bid, buy_now, bid_history, activate_if_due
from .utils import get_client_ip, get_user_agent

logger = logging.getLogger(__name__)

READ_ONLY_FIELDS = ('id', 'created_at', 'current_bid', 'bid_count')


class AuctionPagination(PageNumberPagination):
    page_size = 12
    page_size_query_param = 'limit'
    max_page_size = 100

    def get_paginated_response(self, data):
        return Response({
            'auctions': data,
            'page': self.page.number,
            'limit': self.page.paginator.per_page,
            'total': self.page.paginator.count,
        })


class AuctionListCreateView(APIView):
    pagination_class = AuctionPagination

    def get_permissions(self):
        if self.request.method == 'GET':
            return []  # public
        return [permissions.IsAuthenticated(), IsSuperAdminOrAdmin()]

    def get(self, request):
        qs = AuctionProperty.objects.select_related('listed_property').order_by('-created_at')

        status_ = request.query_params.get('status')
        if status_:
            qs = qs.filter(status=status_)

        paginator = self.pagination_class()
        page = paginator.paginate_queryset(qs, request, view=self)
        return paginator.get_paginated_response(AuctionListSerializer(page, many=True).data)

    def post(self, request):
        ser = AuctionCreateSerializer(data=request.data)
        if not ser.is_valid():
            return Response(ser.errors, status=status.HTTP_400_BAD_REQUEST)
        auction = ser.save()
        logger.info("Auction %s created by user %s", auction.id, request.user.id)
        return Response(AuctionDetailSerializer(auction).data, status=status.HTTP_201_CREATED)


class AuctionDetailView(APIView):

    def get_permissions(self):
        if self.request.method == 'GET':
            return []  # public
        return [permissions.IsAuthenticated(), IsSuperAdminOrAdmin()]

    def get(self, request, pk):
        auction = get_object_or_404(AuctionProperty, pk=pk)
        # opportunistic activation
        if activate_if_due(auction.id):
            auction.refresh_from_db()
        return Response({'auction': AuctionDetailSerializer(auction).data})

    def patch(self, request, pk):
        auction = get_object_or_404(AuctionProperty, pk=pk)
        updates = {k: v for k, v in request.data.items() if k not in READ_ONLY_FIELDS}

        ser = AuctionUpdateSerializer(auction, data=updates, partial=True)
        if not ser.is_valid():
            return Response(ser.errors, status=status.HTTP_400_BAD_REQUEST)

        with transaction.atomic():
            auction = ser.save()
            AuctionEvent.objects.create(
                auction_property=auction,
                event_type=AuctionEventType.AUCTION_UPDATED,
                event_data={'updates': updates},
            )
        logger.info("Auction %s updated by user %s: %s", auction.id, request.user.id, sorted(updates))
        return Response({'auction': AuctionDetailSerializer(auction).data})

    def delete(self, request, pk):
        auction = get_object_or_404(AuctionProperty, pk=pk)

        if auction.status == AuctionStatus.LIVE:
            return Response({'error': 'Cannot delete live auction'}, status=status.HTTP_400_BAD_REQUEST)

        auction.delete()
        logger.info("Auction %s deleted by user %s", pk, request.user.id)
        return Response({'success': True})


class PlaceBidView(APIView):

    def get_permissions(self):
        if self.request.method == 'GET':
            return []  # public
        return [permissions.IsAuthenticated()]

    def get(self, request, pk):
        bids = bid_history(pk)
        return Response({'bids': BidHistorySerializer(bids, many=True).data})

    def post(self, request, pk):
        ser = PlaceBidSerializer(data=request.data)
        if not ser.is_valid():
            return Response(InvalidAmount().as_payload(), status=status.HTTP_400_BAD_REQUEST)

        try:
            result = place_bid(
                pk,
                request.user,
                ser.validated_data['amount'],
                auto_bid_max=ser.validated_data.get('auto_bid_max'),
                ip_address=get_client_ip(request),
                user_agent=get_user_agent(request),
            )
        except AuctionError as e:
            return Response(e.as_payload(), status=e.status_code)

        return Response(result, status=status.HTTP_200_OK)


class BuyNowView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, pk):
        try:
            result = buy_now(
                pk,
                request.user,
                ip_address=get_client_ip(request),
                user_agent=get_user_agent(request),
            )
        except AuctionError as e:
            return Response(e.as_payload(), status=e.status_code)

        return Response(result, status=status.HTTP_200_OK)
