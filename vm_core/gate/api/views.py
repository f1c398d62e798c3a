# vm_core/gate/api/views.py
from __future__ import annotations

from django.core.exceptions import ValidationError as DjangoValidationError

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError as DRFValidationError
from rest_framework.response import Response
from rest_framework.views import APIView

from vm_core.common.api.pagination import paginate
from vm_core.common.permissions import IsEstateAdmin, IsSecurity
from vm_core.common.scope import resolve_estate_id
from vm_core.gate.api.serializers import (
    DashboardSerializer,
    EntryLogSerializer,
    RecentQuerySerializer,
    ValidateCodeSerializer,
    ValidateQRSerializer,
)
from vm_core.gate.selectors import DashboardSelector, EntryLogSelector
from vm_core.gate.services import GateService


class GateViewSet(viewsets.ViewSet):
    """
    Security-facing endpoints. Grants and denials both return 200;
    the decision is in data.result.
    """

    permission_classes = [IsSecurity]

    def _validate(self, request, code: str, gate: str | None):
        outcome, _ = GateService.validate_code(
            submitted_code=code,
            security_id=request.user.id,
            gate=gate or None,
            estate_id=resolve_estate_id(request),
        )
        return Response({"success": True, "data": outcome.to_payload()}, status=status.HTTP_200_OK)

    @action(detail=False, methods=["post"])
    def validate(self, request):
        ser = ValidateCodeSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        return self._validate(request, ser.validated_data["code"], ser.validated_data.get("gate"))

    @action(detail=False, methods=["post"], url_path="validate-qr")
    def validate_qr(self, request):
        ser = ValidateQRSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        return self._validate(request, ser.validated_data["qr_data"], ser.validated_data.get("gate"))

    @action(detail=False, methods=["get"])
    def recent(self, request):
        q = RecentQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)

        logs = EntryLogSelector.recent_for_security(
            security_id=request.user.id,
            limit=q.validated_data["limit"],
        )
        return Response({"success": True, "data": {"validations": EntryLogSerializer(logs, many=True).data}})


class EntryLogViewSet(viewsets.ViewSet):
    permission_classes = [IsEstateAdmin]

    def list(self, request):
        try:
            qs = EntryLogSelector.estate_logs(
                estate_id=resolve_estate_id(request),
                params=request.query_params,
            )
        except DjangoValidationError as e:
            raise DRFValidationError(e.message_dict if hasattr(e, "error_dict") else {"detail": e.messages})

        return paginate(request, qs, EntryLogSerializer)


class DashboardView(APIView):
    permission_classes = [IsEstateAdmin]

    def get(self, request):
        stats = DashboardSelector.stats(estate_id=resolve_estate_id(request))
        return Response({"success": True, "data": DashboardSerializer(stats).data})
