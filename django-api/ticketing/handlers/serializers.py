"""Serializers for request payloads and domain model responses."""

from rest_framework import serializers


class PurchaseInputSerializer(serializers.Serializer):
    """Body of POST /api/purchases"""

    name = serializers.CharField(max_length=255)
    email = serializers.EmailField()
    ticket_type_id = serializers.UUIDField()
    quantity = serializers.IntegerField()
    payment_method = serializers.CharField(max_length=50)


class RedemptionInputSerializer(serializers.Serializer):
    """Body of POST /api/redemptions"""

    code = serializers.CharField()


class BuyerSerializer(serializers.Serializer):
    """Serializer for Buyer domain model."""

    name = serializers.CharField()
    email = serializers.EmailField()


class IssuedTicketSerializer(serializers.Serializer):
    """Serializer for Ticket domain model."""

    id = serializers.UUIDField(source="id.value")
    code = serializers.CharField(source="code.value")
    used = serializers.BooleanField()


class TicketTypeSerializer(serializers.Serializer):
    """Serializer for TicketType domain model."""

    id = serializers.UUIDField(source="id.value")
    name = serializers.CharField()
    price = serializers.DecimalField(
        source="price.amount", max_digits=10, decimal_places=2
    )
    stock = serializers.IntegerField(source="stock.value")


class PurchaseReceiptSerializer(serializers.Serializer):
    """Serializer for PurchaseReceipt domain model."""

    buyer = BuyerSerializer()
    ticket_type = TicketTypeSerializer()
    tickets = IssuedTicketSerializer(many=True)


class TicketDetailsSerializer(serializers.Serializer):
    """Serializer for TicketDetails domain model."""

    id = serializers.UUIDField(source="ticket_id.value")
    code = serializers.CharField(source="code.value")
    used = serializers.BooleanField()
    redeemed_at = serializers.DateTimeField(allow_null=True)
    payment_method = serializers.CharField()
    event_id = serializers.UUIDField(source="event_id.value")
    event_title = serializers.CharField()
    ticket_type = serializers.CharField(source="ticket_type_name")
    price = serializers.DecimalField(
        source="price.amount", max_digits=10, decimal_places=2
    )
    buyer_name = serializers.CharField()
    buyer_email = serializers.EmailField()


class EventSerializer(serializers.Serializer):
    """Serializer for Event domain model."""

    id = serializers.UUIDField(source="id.value")
    title = serializers.CharField()
    starts_at = serializers.DateTimeField()
    venue = serializers.CharField()


class SalesStatsSerializer(serializers.Serializer):
    """Serializer for SalesStats domain model."""

    tickets_sold = serializers.IntegerField()
    tickets_redeemed = serializers.IntegerField()
    revenue = serializers.DecimalField(
        source="revenue.amount", max_digits=12, decimal_places=2
    )
    events = serializers.IntegerField()
