from rest_framework import serializers
from .models import Customer


class CustomerSerializer(serializers.ModelSerializer):
    class Meta:
        model = Customer
        fields = [
            'id', 'name', 'phone', 'email',
            'visit_count', 'total_spent', 'last_visit', 'created_at'
        ]
        read_only_fields = ['visit_count', 'total_spent', 'last_visit', 'created_at']

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('Customer name is required')
        return value
