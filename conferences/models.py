"""Django ORM models for the collaborators of the fee engine.

Conferences own fee catalogs; registrations form the ledger that fee usage is
derived from.
"""

import uuid

from django.db import models


class Conference(models.Model):
    """Persistence model for conferences."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    slug = models.SlugField(max_length=120, unique=True)
    name = models.CharField(max_length=255)
    currency = models.CharField(max_length=3, blank=True, default="")
    vat_percentage = models.DecimalField(
        max_digits=5, decimal_places=2, blank=True, null=True
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return self.name


class Registration(models.Model):
    """Persistence model for registrations.

    ``reference`` identifies the registration being created and is unique, so a
    retried submission can never claim a second fee unit.
    """

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        CONFIRMED = "confirmed", "Confirmed"
        PAID = "paid", "Paid"
        CANCELLED = "cancelled", "Cancelled"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    conference = models.ForeignKey(
        Conference, on_delete=models.CASCADE, related_name="registrations"
    )
    registration_fee = models.ForeignKey(
        "registration_fees.RegistrationFee",
        on_delete=models.PROTECT,
        related_name="registrations",
        blank=True,
        null=True,
    )
    reference = models.CharField(max_length=255, unique=True)
    status = models.CharField(
        max_length=20, choices=Status.choices, default=Status.PENDING
    )
    price_gross = models.DecimalField(
        max_digits=10, decimal_places=2, blank=True, null=True
    )
    currency = models.CharField(max_length=3, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["registration_fee", "status"]),
        ]

    def __str__(self) -> str:
        return self.reference
