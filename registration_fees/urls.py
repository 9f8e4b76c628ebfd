from django.urls import path

from registration_fees.handlers import (
    AdminFeeDetailView,
    AdminFeeListView,
    AdminFeeReorderView,
    PublicFeeListView,
    ReserveFeeView,
)

urlpatterns = [
    path(
        "conferences/<str:conference_ref>/registration-fees",
        PublicFeeListView.as_view(),
        name="public-fee-list",
    ),
    path(
        "conferences/<str:conference_ref>/registration-fees/<str:fee_id>/reserve",
        ReserveFeeView.as_view(),
        name="fee-reserve",
    ),
    path(
        "admin/conferences/<str:conference_ref>/registration-fees",
        AdminFeeListView.as_view(),
        name="admin-fee-list",
    ),
    path(
        "admin/conferences/<str:conference_ref>/registration-fees/reorder",
        AdminFeeReorderView.as_view(),
        name="admin-fee-reorder",
    ),
    path(
        "admin/conferences/<str:conference_ref>/registration-fees/<str:fee_id>",
        AdminFeeDetailView.as_view(),
        name="admin-fee-detail",
    ),
]
