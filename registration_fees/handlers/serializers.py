"""Serializers for transforming domain models to API responses and parsing input."""

from rest_framework import serializers

from registration_fees.domain.pricing import PriceInput
from registration_fees.services.catalog_service import FeeInput

MONEY = {"max_digits": 10, "decimal_places": 2}


class RegistrationFeeOptionSerializer(serializers.Serializer):
    """Serializer for the public RegistrationFeeOption projection."""

    id = serializers.UUIDField(source="id.value")
    name = serializers.CharField()
    price_gross = serializers.DecimalField(**MONEY)
    currency = serializers.CharField(source="currency.code")
    is_available = serializers.BooleanField()
    disabled_reason = serializers.SerializerMethodField()
    sold_count = serializers.IntegerField()
    capacity = serializers.SerializerMethodField()

    def get_disabled_reason(self, option) -> str | None:
        return option.disabled_reason.value if option.disabled_reason else None

    def get_capacity(self, option) -> int | None:
        return option.capacity.value if option.capacity is not None else None

    def to_representation(self, instance):
        data = super().to_representation(instance)
        if data["disabled_reason"] is None:
            del data["disabled_reason"]
        return data


class PublicFeeListSerializer(serializers.Serializer):
    fees = RegistrationFeeOptionSerializer(many=True)
    currency = serializers.CharField(source="currency.code")


class FeeDefinitionSerializer(serializers.Serializer):
    """Serializer for the FeeDefinition domain model."""

    id = serializers.UUIDField(source="id.value")
    conference_id = serializers.UUIDField(source="conference_id.value")
    name = serializers.CharField()
    valid_from = serializers.DateField()
    valid_to = serializers.DateField()
    is_active = serializers.BooleanField()
    price_net = serializers.DecimalField(**MONEY)
    price_gross = serializers.DecimalField(**MONEY)
    currency = serializers.CharField(source="currency.code")
    capacity = serializers.SerializerMethodField()
    display_order = serializers.IntegerField()
    created_at = serializers.DateTimeField()
    updated_at = serializers.DateTimeField()

    def get_capacity(self, fee) -> int | None:
        return fee.capacity.value if fee.capacity is not None else None


class RegistrationFeeAdminSerializer(serializers.Serializer):
    """Serializer for the admin projection: fee fields plus usage."""

    sold_count = serializers.IntegerField()
    is_sold_out = serializers.BooleanField()

    def to_representation(self, instance):
        data = FeeDefinitionSerializer(instance.fee).data
        data.update(super().to_representation(instance))
        return data


class ReservationSerializer(serializers.Serializer):
    registration_id = serializers.CharField()
    fee_id = serializers.UUIDField(source="fee_id.value")
    price_gross = serializers.DecimalField(source="price.price_gross", **MONEY)
    currency = serializers.CharField(source="price.currency.code")
    reserved_at = serializers.DateTimeField()


class FeeInputSerializer(serializers.Serializer):
    """Validates the format of admin fee input.

    Business rules (window order, gross >= net) are enforced by the service.
    Use with ``partial=True`` for updates.
    """

    name = serializers.CharField(max_length=255)
    valid_from = serializers.DateField(input_formats=["%Y-%m-%d"])
    valid_to = serializers.DateField(input_formats=["%Y-%m-%d"])
    is_active = serializers.BooleanField(default=True)
    price_net = serializers.DecimalField(required=False, allow_null=True, min_value=0, **MONEY)
    price_gross = serializers.DecimalField(required=False, allow_null=True, min_value=0, **MONEY)
    prices_include_vat = serializers.BooleanField(default=False)
    vat_percentage = serializers.DecimalField(
        max_digits=5, decimal_places=2, required=False, allow_null=True, min_value=0
    )
    capacity = serializers.IntegerField(required=False, allow_null=True, min_value=0)
    currency = serializers.CharField(required=False, allow_blank=True, max_length=3)
    display_order = serializers.IntegerField(required=False, allow_null=True, min_value=0)

    def to_fee_input(self) -> FeeInput:
        data = self.validated_data
        return FeeInput(
            name=data["name"],
            valid_from=data["valid_from"],
            valid_to=data["valid_to"],
            is_active=data["is_active"],
            prices=PriceInput(
                price_net=data.get("price_net"),
                price_gross=data.get("price_gross"),
                prices_include_vat=data["prices_include_vat"],
                vat_percentage=data.get("vat_percentage"),
            ),
            currency=data.get("currency") or None,
            capacity=data.get("capacity"),
            display_order=data.get("display_order"),
        )


class ReorderSerializer(serializers.Serializer):
    fee_ids = serializers.ListField(child=serializers.CharField())


class ReserveSerializer(serializers.Serializer):
    reference = serializers.CharField(max_length=255)
