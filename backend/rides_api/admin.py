from django.contrib import admin

from .models import DriverPresenceRecord, RideRecord


@admin.register(DriverPresenceRecord)
class DriverPresenceRecordAdmin(admin.ModelAdmin):
    list_display = ('driver_id', 'is_online', 'is_verified', 'latitude', 'longitude', 'last_updated_at')
    list_filter = ('is_online', 'is_verified')
    search_fields = ('driver_id',)


@admin.register(RideRecord)
class RideRecordAdmin(admin.ModelAdmin):
    list_display = ('id', 'rider_id', 'driver_id', 'status', 'ride_class', 'fare', 'created_at')
    list_filter = ('status', 'ride_class', 'payment_status')
    search_fields = ('id', 'rider_id', 'driver_id')
    # transitions go through the dispatcher's conditional writes
    readonly_fields = ('status', 'driver_id')
