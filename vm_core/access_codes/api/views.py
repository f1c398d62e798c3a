# vm_core/access_codes/api/views.py
from __future__ import annotations

from uuid import UUID

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound, PermissionDenied
from rest_framework.response import Response

from vm_core.access_codes.api.serializers import (
    AccessCodeCreateSerializer,
    AccessCodeListQuerySerializer,
    AccessCodeSerializer,
)
from vm_core.access_codes.generator import CodeGenerationExhausted
from vm_core.access_codes.selectors import AccessCodeSelector
from vm_core.access_codes.services import AccessCodeService, CodeNotCancellable
from vm_core.common.api.exceptions import ConflictError, RetryLater
from vm_core.common.api.pagination import paginate
from vm_core.common.permissions import IsResident
from vm_core.gate.api.serializers import EntryLogSerializer, HistoryQuerySerializer
from vm_core.gate.selectors import EntryLogSelector
from vm_core.iam.selectors import get_active_membership


class AccessCodeViewSet(viewsets.ViewSet):
    """
    Resident-facing access code endpoints.
    Reads go through selectors, writes through AccessCodeService.
    """

    permission_classes = [IsResident]

    def _membership(self, request):
        membership = get_active_membership(user_id=request.user.id)
        if membership is None or membership.home_id is None:
            raise PermissionDenied("Resident is not attached to a home.")
        return membership

    def _parse_id(self, pk) -> UUID:
        try:
            return UUID(str(pk))
        except ValueError:
            raise NotFound("Access code not found.")

    # ----------------------------
    # Reads
    # ----------------------------
    def list(self, request):
        q = AccessCodeListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)

        qs = AccessCodeSelector.list_resident_codes(
            owner_id=request.user.id,
            status=q.validated_data["status"],
        ).select_related("resident__estate_membership__home")
        return paginate(request, qs, AccessCodeSerializer)

    @action(detail=False, methods=["get"])
    def history(self, request):
        q = HistoryQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)

        qs = EntryLogSelector.resident_history(
            resident_id=request.user.id,
            from_date=q.validated_data.get("from_date"),
            to_date=q.validated_data.get("to_date"),
        )
        return paginate(request, qs, EntryLogSerializer)

    # ----------------------------
    # Writes
    # ----------------------------
    def create(self, request):
        membership = self._membership(request)

        ser = AccessCodeCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data

        try:
            access_code = AccessCodeService.create_code(
                resident_id=request.user.id,
                estate_id=membership.estate_id,
                visit_date=data["visit_date"],
                start_time=data["start_time"],
                end_time=data["end_time"],
                visitor_name=data.get("visitor_name"),
            )
        except CodeGenerationExhausted:
            raise RetryLater("Unable to generate a unique access code right now. Please try again.")

        return Response(AccessCodeSerializer(access_code).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        try:
            access_code = AccessCodeService.cancel_code(access_code_id=self._parse_id(pk), owner_id=request.user.id)
        except AccessCodeSelector.NotFound:
            raise NotFound("Access code not found.")
        except CodeNotCancellable as e:
            raise ConflictError(str(e), code="code_not_cancellable")

        return Response(AccessCodeSerializer(access_code).data, status=status.HTTP_200_OK)
