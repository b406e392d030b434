from rest_framework import serializers
from .models import Bill, BillItem


class BillItemSerializer(serializers.ModelSerializer):
    medicine_name = serializers.SerializerMethodField()
    line_total = serializers.SerializerMethodField()

    class Meta:
        model = BillItem
        fields = ['id', 'medicine', 'medicine_name', 'quantity', 'price', 'line_total']
        read_only_fields = fields

    def get_medicine_name(self, obj):
        return obj.get_display_name()

    def get_line_total(self, obj):
        return str(obj.get_line_total())


class BillSerializer(serializers.ModelSerializer):
    bill_number = serializers.CharField(read_only=True)
    items = BillItemSerializer(many=True, read_only=True)
    subtotal = serializers.SerializerMethodField()

    class Meta:
        model = Bill
        fields = [
            'id', 'bill_number', 'customer', 'customer_name', 'date', 'items',
            'subtotal', 'discount_amount', 'total_amount', 'paid', 'created_at',
        ]
        read_only_fields = ['customer', 'discount_amount', 'total_amount', 'created_at']

    def get_subtotal(self, obj):
        return str(obj.get_subtotal())


class BillUpdateSerializer(serializers.Serializer):
    """Header fields that may change after a bill is created. Items and amounts are fixed."""
    customer_name = serializers.CharField(max_length=255, required=False)
    date = serializers.DateField(required=False)
    paid = serializers.BooleanField(required=False)

    def validate_customer_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Customer name cannot be blank.")
        return value


# Current bill

class CartLineSerializer(serializers.Serializer):
    medicine_id = serializers.IntegerField()
    medicine_name = serializers.CharField()
    quantity = serializers.IntegerField()
    price = serializers.DecimalField(max_digits=10, decimal_places=2)
    line_total = serializers.SerializerMethodField()

    def get_line_total(self, obj):
        return str(obj.get_line_total())


class CurrentBillSerializer(serializers.Serializer):
    customer_name = serializers.CharField()
    customer_id = serializers.IntegerField(allow_null=True)
    items = CartLineSerializer(source='lines', many=True)
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2)
    discount_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    total = serializers.DecimalField(max_digits=12, decimal_places=2)
    is_empty = serializers.BooleanField()


class CurrentBillUpdateSerializer(serializers.Serializer):
    customer_name = serializers.CharField(required=False, allow_blank=True, trim_whitespace=False)
    customer_id = serializers.IntegerField(required=False, allow_null=True)
    # Kept as raw input so the cart reports its own message for bad values
    discount_amount = serializers.CharField(required=False)


class CartItemAddSerializer(serializers.Serializer):
    medicine_id = serializers.IntegerField()
    quantity = serializers.IntegerField(default=1)


class CartItemQuantitySerializer(serializers.Serializer):
    quantity = serializers.IntegerField()


class CommitSerializer(serializers.Serializer):
    paid = serializers.BooleanField(default=False)


class ReceiptLineSerializer(serializers.Serializer):
    name = serializers.CharField()
    quantity = serializers.IntegerField()
    unit_price = serializers.DecimalField(max_digits=10, decimal_places=2)
    line_total = serializers.DecimalField(max_digits=12, decimal_places=2)


class ReceiptSerializer(serializers.Serializer):
    bill_id = serializers.IntegerField()
    bill_number = serializers.CharField()
    customer_name = serializers.CharField()
    date = serializers.DateField()
    lines = ReceiptLineSerializer(many=True)
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2)
    # Absent from the receipt when no discount was given
    discount_amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)
    total_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    status = serializers.CharField()
