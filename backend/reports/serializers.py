from rest_framework import serializers


class TopSellingSerializer(serializers.Serializer):
    medicine_id = serializers.IntegerField()
    name = serializers.CharField()
    quantity = serializers.IntegerField()
    revenue = serializers.DecimalField(max_digits=14, decimal_places=2)


class CategoryCountSerializer(serializers.Serializer):
    category = serializers.CharField()
    count = serializers.IntegerField()


class CategoryValueSerializer(serializers.Serializer):
    category = serializers.CharField()
    value = serializers.DecimalField(max_digits=14, decimal_places=2)


class SalesSummarySerializer(serializers.Serializer):
    total_sales = serializers.DecimalField(max_digits=14, decimal_places=2)
    bill_count = serializers.IntegerField()
    paid_amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    paid_count = serializers.IntegerField()
    unpaid_amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    unpaid_count = serializers.IntegerField()


class DashboardSerializer(serializers.Serializer):
    total_medicines = serializers.IntegerField()
    low_stock_count = serializers.IntegerField()
    expiring_count = serializers.IntegerField()
    pending_bills = serializers.IntegerField()
    total_bills = serializers.IntegerField()
    inventory_value = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_sales = serializers.DecimalField(max_digits=14, decimal_places=2)
