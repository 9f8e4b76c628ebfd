from registration_fees.domain.availability import Availability, UnavailableReason, evaluate
from registration_fees.domain.models import (
    Conference,
    FeeDefinition,
    FeeTerms,
    PriceSnapshot,
    PublicFeeList,
    RegistrationFeeOption,
    RegistrationFeeOptionAdmin,
    Reservation,
)
from registration_fees.domain.value_objects import (
    Capacity,
    ConferenceId,
    Currency,
    FeeId,
    Money,
)

__all__ = [
    "Availability",
    "UnavailableReason",
    "evaluate",
    "Conference",
    "FeeDefinition",
    "FeeTerms",
    "PriceSnapshot",
    "PublicFeeList",
    "RegistrationFeeOption",
    "RegistrationFeeOptionAdmin",
    "Reservation",
    "ConferenceId",
    "FeeId",
    "Currency",
    "Money",
    "Capacity",
]
