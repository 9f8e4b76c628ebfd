"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Map domain errors to HTTP responses
- Never contain business logic
- Never expose internal error details
"""

from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from registration_fees import cache
from registration_fees.domain.errors import (
    AllocationError,
    DomainError,
    ErrorCode,
    FeeValidationError,
)
from registration_fees.handlers.dependencies import get_fee_services
from registration_fees.handlers.serializers import (
    FeeDefinitionSerializer,
    FeeInputSerializer,
    PublicFeeListSerializer,
    RegistrationFeeAdminSerializer,
    ReorderSerializer,
    ReservationSerializer,
    ReserveSerializer,
)
from registration_fees.services import FeeRemoval

ERROR_STATUS = {
    ErrorCode.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_FEE_ID: status.HTTP_400_BAD_REQUEST,
    ErrorCode.FEE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.CONFERENCE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.FEE_UNAVAILABLE: status.HTTP_409_CONFLICT,
    ErrorCode.REGISTRATION_CONFLICT: status.HTTP_409_CONFLICT,
    ErrorCode.TRANSIENT_CONFLICT: status.HTTP_503_SERVICE_UNAVAILABLE,
}

NO_STORE = {"Cache-Control": "no-store, max-age=0"}


def error_response(error: DomainError) -> Response:
    body = {"code": error.code.value, "message": error.message}
    if isinstance(error, AllocationError):
        body["reason"] = error.reason.value
    if isinstance(error, FeeValidationError) and error.field:
        body["field"] = error.field
    return Response({"error": body}, status=ERROR_STATUS[error.code])


def invalid_input_response(errors) -> Response:
    body = {
        "code": ErrorCode.VALIDATION_ERROR.value,
        "message": "Invalid request body",
        "fields": errors,
    }
    return Response({"error": body}, status=status.HTTP_400_BAD_REQUEST)


class PublicFeeListView(APIView):
    """Handler for GET /api/conferences/{conference}/registration-fees"""

    def get(self, request: Request, conference_ref: str) -> Response:
        cached = cache.get_public_fees(conference_ref)
        if cached is not None:
            return Response(cached)
        try:
            fee_list = get_fee_services().projections.get_public_fees(conference_ref)
        except DomainError as error:
            return error_response(error)
        payload = PublicFeeListSerializer(fee_list).data
        cache.set_public_fees(conference_ref, payload)
        return Response(payload)


class ReserveFeeView(APIView):
    """Handler for POST /api/conferences/{conference}/registration-fees/{fee_id}/reserve"""

    def post(self, request: Request, conference_ref: str, fee_id: str) -> Response:
        serializer = ReserveSerializer(data=request.data)
        if not serializer.is_valid():
            return invalid_input_response(serializer.errors)
        try:
            reservation = get_fee_services().gate.reserve(
                fee_id, conference_ref, serializer.validated_data["reference"]
            )
        except DomainError as error:
            return error_response(error)
        return Response(ReservationSerializer(reservation).data, status=status.HTTP_201_CREATED)


class AdminFeeListView(APIView):
    """Handler for GET/POST /api/admin/conferences/{conference}/registration-fees"""

    def get(self, request: Request, conference_ref: str) -> Response:
        try:
            rows = get_fee_services().projections.list_for_admin(conference_ref)
        except DomainError as error:
            return error_response(error)
        data = RegistrationFeeAdminSerializer(rows, many=True).data
        return Response({"fees": data}, headers=NO_STORE)

    def post(self, request: Request, conference_ref: str) -> Response:
        serializer = FeeInputSerializer(data=request.data)
        if not serializer.is_valid():
            return invalid_input_response(serializer.errors)
        try:
            fee = get_fee_services().catalog.create_fee(conference_ref, serializer.to_fee_input())
        except DomainError as error:
            return error_response(error)
        return Response({"fee": FeeDefinitionSerializer(fee).data}, status=status.HTTP_201_CREATED)


class AdminFeeDetailView(APIView):
    """Handler for PATCH/DELETE /api/admin/conferences/{conference}/registration-fees/{fee_id}"""

    def patch(self, request: Request, conference_ref: str, fee_id: str) -> Response:
        serializer = FeeInputSerializer(data=request.data, partial=True)
        if not serializer.is_valid():
            return invalid_input_response(serializer.errors)
        try:
            fee = get_fee_services().catalog.update_fee(
                fee_id, conference_ref, serializer.validated_data
            )
        except DomainError as error:
            return error_response(error)
        return Response({"fee": FeeDefinitionSerializer(fee).data})

    def delete(self, request: Request, conference_ref: str, fee_id: str) -> Response:
        try:
            removal = get_fee_services().catalog.delete_fee(fee_id, conference_ref)
        except DomainError as error:
            return error_response(error)
        return Response(
            {"success": True, "deactivated": removal is FeeRemoval.DEACTIVATED}
        )


class AdminFeeReorderView(APIView):
    """Handler for POST /api/admin/conferences/{conference}/registration-fees/reorder"""

    def post(self, request: Request, conference_ref: str) -> Response:
        serializer = ReorderSerializer(data=request.data)
        if not serializer.is_valid():
            return invalid_input_response(serializer.errors)
        try:
            get_fee_services().catalog.reorder_fees(
                conference_ref, serializer.validated_data["fee_ids"]
            )
        except DomainError as error:
            return error_response(error)
        return Response({"success": True})
