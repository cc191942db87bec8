from django.contrib import admin
from .models import Property


@admin.register(Property)
class PropertyAdmin(admin.ModelAdmin):
    list_display = ('title', 'city', 'property_type', 'bedrooms', 'price', 'created_at')
    list_filter = ('property_type', 'city')
    search_fields = ('title', 'address', 'city')
    readonly_fields = ('created_at', 'updated_at')

    fieldsets = (
        (None, {
            'fields': ('title', 'description', 'property_type', 'price')
        }),
        ('Location', {
            'fields': ('address', 'city', 'state')
        }),
        ('Details', {
            'fields': ('bedrooms', 'bathrooms', 'square_meters', 'virtual_tour_url')
        }),
        ('Metadata', {
            'fields': ('created_at', 'updated_at')
        }),
    )
