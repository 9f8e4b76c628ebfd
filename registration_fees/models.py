"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/models.py.
"""

import uuid

from django.core.validators import MinValueValidator
from django.db import models


class RegistrationFee(models.Model):
    """Persistence model for custom registration fees.

    There is deliberately no sold-count column: usage is always derived from
    the registrations ledger.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    conference = models.ForeignKey(
        "conferences.Conference",
        on_delete=models.PROTECT,
        related_name="registration_fees",
    )
    name = models.CharField(max_length=255)
    valid_from = models.DateField()
    valid_to = models.DateField()
    is_active = models.BooleanField(default=True)
    price_net = models.DecimalField(
        max_digits=10, decimal_places=2, validators=[MinValueValidator(0)]
    )
    price_gross = models.DecimalField(
        max_digits=10, decimal_places=2, validators=[MinValueValidator(0)]
    )
    capacity = models.PositiveIntegerField(blank=True, null=True)
    currency = models.CharField(max_length=3)
    display_order = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["display_order", "created_at", "id"]
        indexes = [
            models.Index(fields=["conference", "display_order"]),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(valid_from__lte=models.F("valid_to")),
                name="registration_fee_valid_window",
            ),
            models.CheckConstraint(
                condition=models.Q(price_gross__gte=models.F("price_net")),
                name="registration_fee_gross_gte_net",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.name} - {self.price_gross} {self.currency}"
