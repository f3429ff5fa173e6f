# mc_core/pharmacy/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from mc_core.pharmacy.models import DeliveryMethod, Medicine, Order, OrderItem, OrderStatus, PaymentMethod


class MedicineSerializer(serializers.ModelSerializer):
    is_low_stock = serializers.BooleanField(read_only=True)
    in_stock = serializers.SerializerMethodField()

    class Meta:
        model = Medicine
        fields = [
            "id",
            "pharmacy",
            "name",
            "description",
            "category",
            "manufacturer",
            "price",
            "stock",
            "min_stock",
            "requires_prescription",
            "is_low_stock",
            "in_stock",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "pharmacy", "created_at", "updated_at"]

    def get_in_stock(self, obj: Medicine) -> bool:
        return obj.stock > 0


class MedicineWriteSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True)
    category = serializers.CharField(max_length=64, required=False, allow_blank=True)
    manufacturer = serializers.CharField(max_length=255, required=False, allow_blank=True)
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    stock = serializers.IntegerField(min_value=0, required=False)
    min_stock = serializers.IntegerField(min_value=0, required=False)
    requires_prescription = serializers.BooleanField(required=False)


class OrderItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderItem
        fields = ["id", "medicine", "medicine_name", "unit_price", "quantity", "requires_prescription", "line_total"]


class OrderSerializer(serializers.ModelSerializer):
    items = OrderItemSerializer(many=True, read_only=True)
    patient_name = serializers.SerializerMethodField()
    pharmacy_name = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            "id",
            "patient",
            "patient_name",
            "pharmacy",
            "pharmacy_name",
            "items",
            "delivery_method",
            "delivery_address",
            "payment_method",
            "notes",
            "subtotal",
            "delivery_fee",
            "total",
            "status",
            "inventory_applied_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    @staticmethod
    def _name(user) -> str:
        account = getattr(user, "account", None)
        return account.display_name if account else user.get_username()

    def get_patient_name(self, obj: Order) -> str:
        return self._name(obj.patient)

    def get_pharmacy_name(self, obj: Order) -> str:
        return self._name(obj.pharmacy)


class OrderLineSerializer(serializers.Serializer):
    medicine_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)


class OrderCreateSerializer(serializers.Serializer):
    pharmacy_id = serializers.IntegerField()
    items = OrderLineSerializer(many=True, allow_empty=False)
    delivery_method = serializers.ChoiceField(choices=DeliveryMethod.choices, default=DeliveryMethod.DELIVERY)
    delivery_address = serializers.CharField(required=False, allow_blank=True, default="")
    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices, default=PaymentMethod.CASH)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class OrderTransitionSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=OrderStatus.choices)
