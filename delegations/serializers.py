from rest_framework import serializers
from .models import DelegationModel


class DelegationSerializer(serializers.ModelSerializer):
    class Meta:
        model = DelegationModel
        fields = [
            'delegation_id', 'name', 'city', 'address', 'manager', 'phone',
            'latitude', 'longitude', 'car_count', 'created_at', 'updated_at'
        ]
        read_only_fields = ['delegation_id', 'created_at', 'updated_at']
        extra_kwargs = {
            'name': {'required': True},
            'city': {'required': True},
            'car_count': {'required': False},
        }

    def validate_name(self, value):
        delegations = DelegationModel.objects.filter(name=value)
        if self.instance:
            # For updates, exclude the current instance from uniqueness check
            delegations = delegations.exclude(pk=self.instance.pk)
        if delegations.exists():
            raise serializers.ValidationError('This delegation name is already taken.')
        return value

    def validate_latitude(self, value):
        if value is not None and not -90 <= value <= 90:
            raise serializers.ValidationError('Latitude must be between -90 and 90.')
        return value

    def validate_longitude(self, value):
        if value is not None and not -180 <= value <= 180:
            raise serializers.ValidationError('Longitude must be between -180 and 180.')
        return value
