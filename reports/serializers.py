from rest_framework import serializers


class DelegationStatisticsSerializer(serializers.Serializer):
    delegation = serializers.CharField()
    total_vehicles = serializers.IntegerField()
    rented_vehicles = serializers.IntegerField()
    available_vehicles = serializers.IntegerField()
    total_reservations = serializers.IntegerField()
    total_revenue = serializers.DecimalField(max_digits=14, decimal_places=2)


class DelegationStatisticsReportSerializer(serializers.Serializer):
    tax_rate = serializers.DecimalField(max_digits=5, decimal_places=4)
    delegations = DelegationStatisticsSerializer(many=True)
    top_delegation = DelegationStatisticsSerializer(allow_null=True)


class TopUserSerializer(serializers.Serializer):
    user_id = serializers.CharField()
    bookings = serializers.IntegerField()


class DashboardSerializer(serializers.Serializer):
    total_bookings = serializers.IntegerField()
    active_bookings = serializers.IntegerField()
    average_booking_duration = serializers.DecimalField(max_digits=10, decimal_places=2)
    active_users = serializers.IntegerField()
    top_users = TopUserSerializer(many=True)
    vehicles_per_delegation = serializers.DictField(child=serializers.IntegerField())
