from rest_framework import serializers
from .models import Property


class PropertySummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Property
        fields = [
            'id', 'title', 'description', 'address', 'city', 'state',
            'bedrooms', 'bathrooms', 'square_meters', 'property_type',
            'price', 'virtual_tour_url',
        ]
        read_only_fields = fields
