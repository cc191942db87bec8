# properties/models.py
from decimal import Decimal
from django.db import models
from django.core.validators import MinValueValidator


class PropertyType(models.TextChoices):
    APARTMENT = 'apartment', 'Apartment'
    VILLA = 'villa', 'Villa'
    TOWNHOUSE = 'townhouse', 'Townhouse'
    PENTHOUSE = 'penthouse', 'Penthouse'
    DUPLEX = 'duplex', 'Duplex'
    STUDIO = 'studio', 'Studio'
    COMMERCIAL = 'commercial', 'Commercial'
    LAND = 'land', 'Land'


class Property(models.Model):
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    address = models.CharField(max_length=255, blank=True)
    city = models.CharField(max_length=120, blank=True)
    state = models.CharField(max_length=120, blank=True)   # governorate
    property_type = models.CharField(max_length=20, choices=PropertyType.choices, default=PropertyType.APARTMENT)
    bedrooms = models.PositiveSmallIntegerField(default=0)
    bathrooms = models.PositiveSmallIntegerField(default=0)
    square_meters = models.PositiveIntegerField(null=True, blank=True)
    price = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    virtual_tour_url = models.URLField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name_plural = 'properties'
        indexes = [
            models.Index(fields=['city', 'property_type'], name='property_city_type_idx'),
        ]

    def __str__(self):
        return f"{self.title} (#{self.id})"
