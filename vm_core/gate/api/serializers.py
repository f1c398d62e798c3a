# vm_core/gate/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from vm_core.gate.models import EntryLog
from vm_core.gate.selectors import RECENT_DEFAULT_LIMIT, RECENT_MAX_LIMIT
from vm_core.iam.selectors import display_name

CODE_LENGTH = 5


def _exact_code(value: str, message: str) -> str:
    code = (value or "").strip().upper()
    if len(code) != CODE_LENGTH:
        raise serializers.ValidationError(message)
    return code


class ValidateCodeSerializer(serializers.Serializer):
    code = serializers.CharField()
    gate = serializers.CharField(max_length=100, required=False, allow_blank=True)

    def validate_code(self, value):
        return _exact_code(value, "Code must be exactly 5 characters")


class ValidateQRSerializer(serializers.Serializer):
    # Scanned QR payloads carry the bare code.
    qr_data = serializers.CharField()
    gate = serializers.CharField(max_length=100, required=False, allow_blank=True)

    def validate_qr_data(self, value):
        return _exact_code(value, "Invalid QR code data")


class RecentQuerySerializer(serializers.Serializer):
    limit = serializers.IntegerField(min_value=1, max_value=RECENT_MAX_LIMIT, required=False, default=RECENT_DEFAULT_LIMIT)


class HistoryQuerySerializer(serializers.Serializer):
    from_date = serializers.DateField(required=False)
    to_date = serializers.DateField(required=False)

    def validate(self, attrs):
        f, t = attrs.get("from_date"), attrs.get("to_date")
        if f and t and f > t:
            raise serializers.ValidationError({"to_date": "to_date must be on or after from_date."})
        return attrs


class EntryLogSerializer(serializers.ModelSerializer):
    code = serializers.CharField(source="submitted_code", read_only=True)
    visitor_name = serializers.SerializerMethodField()
    resident_name = serializers.SerializerMethodField()
    home = serializers.SerializerMethodField()
    security_name = serializers.SerializerMethodField()

    class Meta:
        model = EntryLog
        fields = [
            "id",
            "code",
            "access_code_id",
            "result",
            "reason_code",
            "reason",
            "gate",
            "visitor_name",
            "resident_id",
            "resident_name",
            "home",
            "security_id",
            "security_name",
            "estate_id",
            "validated_at",
        ]
        read_only_fields = fields

    def get_visitor_name(self, obj: EntryLog):
        if obj.access_code_id is None:
            return None
        return obj.access_code.visitor_name

    def get_resident_name(self, obj: EntryLog) -> str:
        return display_name(obj.resident)

    def get_home(self, obj: EntryLog):
        membership = getattr(obj.resident, "estate_membership", None)
        home = getattr(membership, "home", None)
        if home is None:
            return None
        return {"name": home.name, "plot_number": home.plot_number, "street": home.street}

    def get_security_name(self, obj: EntryLog) -> str:
        return display_name(obj.security)


class DashboardSerializer(serializers.Serializer):
    total_homes = serializers.IntegerField()
    total_residents = serializers.IntegerField()
    active_codes_today = serializers.IntegerField()
    entries_today = serializers.DictField(child=serializers.IntegerField())
    recent_activity = EntryLogSerializer(many=True)
