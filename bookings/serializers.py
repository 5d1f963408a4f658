from rest_framework import serializers

from .models import BookingModel
from .utils import calculate_duration_days, calculate_total_price


class BookingSerializer(serializers.ModelSerializer):
    duration_days = serializers.SerializerMethodField()
    total_price = serializers.SerializerMethodField()

    class Meta:
        model = BookingModel
        fields = [
            'booking_id', 'vehicle', 'delegation', 'user_id',
            'start_date', 'end_date', 'duration_days', 'total_price', 'created_at'
        ]
        read_only_fields = ['booking_id', 'created_at']
        extra_kwargs = {
            'vehicle': {'required': True},
            'delegation': {'required': True},
            'user_id': {'required': True, 'allow_blank': False},
            'start_date': {'required': True},
            'end_date': {'required': True},
        }
        # Overlap and (vehicle, start_date) clashes are reported as 409 by create_booking
        validators = []

    def get_duration_days(self, obj):
        return calculate_duration_days(obj.start_date, obj.end_date)

    def get_total_price(self, obj):
        return str(calculate_total_price(obj, obj.vehicle))

    def validate(self, data):
        """
        Validate date logic and ownership:
          - end_date >= start_date
          - the vehicle belongs to the delegation
        """
        start_date = data.get('start_date')
        end_date = data.get('end_date')
        if start_date is not None and end_date is not None and end_date < start_date:
            raise serializers.ValidationError("End date must not be earlier than start date.")

        vehicle = data.get('vehicle')
        delegation = data.get('delegation')
        if vehicle is not None and delegation is not None and vehicle.delegation_id != delegation.pk:
            raise serializers.ValidationError({'vehicle': "The vehicle does not belong to this delegation."})
        return data


class BookingCancelSerializer(serializers.Serializer):
    vehicle = serializers.IntegerField(min_value=1)
    start_date = serializers.DateField()
