"""
Places Serializers
"""

from rest_framework import serializers

from places.models import MAX_VENUE_IMAGES, Amenity


class VenueSerializer(serializers.Serializer):
    """Read representation of a VenueRecord."""

    id = serializers.CharField()
    user_id = serializers.IntegerField(allow_null=True)
    name = serializers.CharField()
    address = serializers.CharField()
    lat = serializers.FloatField()
    lng = serializers.FloatField()
    amenities = serializers.ListField(child=serializers.CharField())
    images = serializers.ListField(child=serializers.CharField())
    status = serializers.CharField()
    created_at = serializers.DateTimeField(allow_null=True)


class ModeratedVenueSerializer(VenueSerializer):
    actions = serializers.SerializerMethodField()

    def get_actions(self, record):
        table = self.context.get('table')
        return list(table.actions_for(record)) if table else []


class VenueEditSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200)
    address = serializers.CharField(max_length=500)
    amenities = serializers.CharField(required=False, allow_blank=True, default='')


class VenueSubmissionSerializer(serializers.Serializer):
    name = serializers.CharField(min_length=2, max_length=200)
    address = serializers.CharField(min_length=2, max_length=500)
    lat = serializers.FloatField(min_value=-90, max_value=90)
    lng = serializers.FloatField(min_value=-180, max_value=180)
    amenities = serializers.ListField(
        child=serializers.ChoiceField(choices=Amenity.choices),
        required=False,
        default=list,
    )
    images = serializers.ListField(
        child=serializers.ImageField(),
        allow_empty=True,
        max_length=MAX_VENUE_IMAGES,
        error_messages={'max_length': 'You can only add up to 3 images.'},
    )


class CardQuerySerializer(serializers.Serializer):
    photo = serializers.IntegerField(required=False, default=0)


class ViewportActionSerializer(serializers.Serializer):
    ACTIONS = ('locate', 'zoom_in', 'zoom_out', 'recenter')

    action = serializers.ChoiceField(choices=ACTIONS)
    lat = serializers.FloatField(required=False, min_value=-90, max_value=90)
    lng = serializers.FloatField(required=False, min_value=-180, max_value=180)

    def validate(self, attrs):
        if attrs['action'] in ('locate', 'recenter') and (attrs.get('lat') is None or attrs.get('lng') is None):
            raise serializers.ValidationError('lat and lng are required for this action.')
        return attrs


class PlaceSearchSerializer(serializers.Serializer):
    q = serializers.CharField(min_length=2, max_length=200)
