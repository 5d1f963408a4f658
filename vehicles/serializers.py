from django.utils import timezone
from rest_framework import serializers
from .models import VehicleModel

# First production car
MIN_VEHICLE_YEAR = 1886


class VehicleSerializer(serializers.ModelSerializer):
    class Meta:
        model = VehicleModel
        fields = [
            'id',
            'delegation',
            'operation_id',
            'make',
            'model',
            'year',
            'color',
            'daily_rate',
            'rented',
            'engine',
            'horsepower',
            'transmission',
            'created_at',
            'updated_at'
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']
        extra_kwargs = {
            'delegation': {'required': True},
            'operation_id': {'required': False},
            'rented': {'required': False},
        }
        # (delegation, operation_id) uniqueness is checked in validate()
        validators = []

    def validate_daily_rate(self, value):
        if value < 0:
            raise serializers.ValidationError("Daily rate must be a positive number.")
        return value

    def validate_year(self, value):
        if not MIN_VEHICLE_YEAR <= value <= timezone.now().year + 1:
            raise serializers.ValidationError("Manufacture year is out of range.")
        return value

    def validate(self, data):
        if self.instance is not None and 'delegation' in data \
                and data['delegation'].pk != self.instance.delegation_id:
            # Bookings keep the delegation they were made at
            raise serializers.ValidationError(
                {'delegation': 'A vehicle cannot be moved to another delegation.'}
            )
        delegation = data.get('delegation', getattr(self.instance, 'delegation', None))
        operation_id = data.get('operation_id', getattr(self.instance, 'operation_id', None))
        if delegation is not None and operation_id:
            duplicates = VehicleModel.objects.filter(delegation=delegation, operation_id=operation_id)
            if self.instance:
                duplicates = duplicates.exclude(pk=self.instance.pk)
            if duplicates.exists():
                raise serializers.ValidationError(
                    {'operation_id': 'This operation ID is already used in the delegation.'}
                )
        return data


class VehicleRentedSerializer(serializers.ModelSerializer):
    rented = serializers.BooleanField(required=True)

    class Meta:
        model = VehicleModel
        fields = ['id', 'rented']
        read_only_fields = ['id']


class AvailabilityQuerySerializer(serializers.Serializer):
    delegation = serializers.CharField(max_length=64)
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    vintage = serializers.BooleanField(required=False, allow_null=True, default=None)

    def validate(self, data):
        if data['end_date'] < data['start_date']:
            raise serializers.ValidationError("End date must not be earlier than start date.")
        return data
