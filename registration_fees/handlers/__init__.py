from registration_fees.handlers.views import (
    AdminFeeDetailView,
    AdminFeeListView,
    AdminFeeReorderView,
    PublicFeeListView,
    ReserveFeeView,
)

__all__ = [
    "AdminFeeDetailView",
    "AdminFeeListView",
    "AdminFeeReorderView",
    "PublicFeeListView",
    "ReserveFeeView",
]
