"""
Places API Views

Endpoints:
- GET  /api/places/discovery/                  GeoJSON of approved venues (?wifi=1&toilets=1...)
- GET  /api/places/discovery/<id>/card/        marker overlay (?photo=<n>)
- GET/POST /api/places/discovery/viewport/     session map viewport
- GET  /api/places/discovery/search/?q=        address autocomplete
- POST /api/places/submissions/                submit a venue (multipart)
- /api/places/moderation/                      admin places table and actions
"""

import logging

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.response import Response

from accounts.permissions import IsProfileAdmin
from core.exceptions import RecordNotFound
from core.geocoding import PlaceAutocomplete
from core.pagination import page_payload
from places.discovery import (
    AmenityFilters,
    build_geojson,
    filter_controls,
    filter_venues,
    load_working_set,
    venue_card,
    viewport_for,
)
from places.moderation import PlacesTable
from places.serializers import (
    CardQuerySerializer,
    ModeratedVenueSerializer,
    PlaceSearchSerializer,
    VenueEditSerializer,
    VenueSerializer,
    VenueSubmissionSerializer,
    ViewportActionSerializer,
)
from places.submission import SUBMITTED_MESSAGE, submit_venue

logger = logging.getLogger(__name__)

UUID_PATTERN = r'[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}'


# ==================== DISCOVERY ====================

class DiscoveryViewSet(viewsets.ViewSet):
    """Public map data."""

    permission_classes = [permissions.AllowAny]
    lookup_value_regex = UUID_PATTERN

    @extend_schema(parameters=[
        OpenApiParameter(tag, bool, required=False) for tag in ('toilets', 'wifi', 'quietEnvironment', 'powerSocket')
    ])
    def list(self, request):
        filters = AmenityFilters.from_query(request.query_params)
        venues = filter_venues(load_working_set(), filters)
        payload = build_geojson(venues)
        payload['filters'] = filter_controls(filters, request.query_params.get('width'))
        return Response(payload)

    @extend_schema(parameters=[CardQuerySerializer])
    @action(detail=True, methods=['get'])
    def card(self, request, pk=None):
        query = CardQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        venue = next((v for v in load_working_set() if v.id == pk), None)
        if venue is None:
            raise RecordNotFound('Place not found.')
        return Response(venue_card(venue, query.validated_data['photo']))

    @extend_schema(request=ViewportActionSerializer)
    @action(detail=False, methods=['get', 'post'])
    def viewport(self, request):
        viewport = viewport_for(request)
        if request.method == 'POST':
            serializer = ViewportActionSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)
            data = serializer.validated_data
            if data['action'] == 'locate':
                viewport.locate(data['lat'], data['lng'])
            elif data['action'] == 'recenter':
                viewport.recenter(data['lat'], data['lng'])
            elif data['action'] == 'zoom_in':
                viewport.zoom_in()
            else:
                viewport.zoom_out()
        viewport.save(request.session)
        return Response(viewport.as_dict())

    @extend_schema(parameters=[PlaceSearchSerializer])
    @action(detail=False, methods=['get'])
    def search(self, request):
        query = PlaceSearchSerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        place = PlaceAutocomplete.lookup(query.validated_data['q'])
        return Response({'results': [place.as_dict()] if place else []})


# ==================== SUBMISSION ====================

class SubmissionViewSet(viewsets.ViewSet):
    permission_classes = [permissions.IsAuthenticated]
    parser_classes = [MultiPartParser, FormParser]

    @extend_schema(request=VenueSubmissionSerializer, responses={201: VenueSerializer})
    def create(self, request):
        data = request.data
        serializer = VenueSubmissionSerializer(data={
            'name': data.get('name'),
            'address': data.get('address'),
            'lat': data.get('lat'),
            'lng': data.get('lng'),
            'amenities': data.getlist('amenities'),
            'images': request.FILES.getlist('images'),
        })
        serializer.is_valid(raise_exception=True)
        validated = serializer.validated_data
        record = submit_venue(request.user, validated, validated['images'])
        return Response(
            {'success': True, 'message': SUBMITTED_MESSAGE, 'data': VenueSerializer(record).data},
            status=status.HTTP_201_CREATED,
        )


# ==================== MODERATION ====================

class VenueModerationViewSet(viewsets.ViewSet):
    """
    Admin places table.

    list:           ?q=<term>&page=<n>, newest first, 6 per page
    approve         POST /moderation/<id>/approve/
    reject          POST /moderation/<id>/reject/
    partial_update  PATCH /moderation/<id>/ name, address, amenities text
    destroy         DELETE /moderation/<id>/
    """

    permission_classes = [IsProfileAdmin]
    lookup_value_regex = UUID_PATTERN

    def _table(self):
        table = PlacesTable()
        table.load()
        return table

    def _respond(self, table, notice, venue_id):
        record = table.rows.get(venue_id)
        payload = {
            'success': notice.level == 'success',
            'message': notice.text,
            'data': ModeratedVenueSerializer(record, context={'table': table}).data if record else None,
        }
        code = status.HTTP_200_OK if notice.level == 'success' else status.HTTP_503_SERVICE_UNAVAILABLE
        return Response(payload, status=code)

    @extend_schema(responses=ModeratedVenueSerializer(many=True))
    def list(self, request):
        table = self._table()
        table.search(request.query_params.get('q', ''))
        page = table.page_of(request.query_params.get('page'))
        return Response(page_payload(
            page,
            lambda record: ModeratedVenueSerializer(record, context={'table': table}).data
        ))

    @action(detail=True, methods=['post'])
    def approve(self, request, pk=None):
        table = self._table()
        return self._respond(table, table.approve(pk), pk)

    @action(detail=True, methods=['post'])
    def reject(self, request, pk=None):
        table = self._table()
        return self._respond(table, table.reject(pk), pk)

    @extend_schema(request=VenueEditSerializer, responses=ModeratedVenueSerializer)
    def partial_update(self, request, pk=None):
        serializer = VenueEditSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        table = self._table()
        notice = table.edit(pk, data['name'], data['address'], data.get('amenities', ''))
        return self._respond(table, notice, pk)

    def destroy(self, request, pk=None):
        table = self._table()
        return self._respond(table, table.delete(pk), pk)
