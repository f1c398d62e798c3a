# vm_core/access_codes/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from vm_core.access_codes.models import AccessCode, AccessCodeStatus
from vm_core.common.clock import read_clock
from vm_core.iam.selectors import display_name

HHMM = "%H:%M"


class AccessCodeCreateSerializer(serializers.Serializer):
    visit_date = serializers.DateField()
    start_time = serializers.TimeField(input_formats=[HHMM])
    end_time = serializers.TimeField(input_formats=[HHMM])
    visitor_name = serializers.CharField(max_length=255, required=False, allow_blank=True, allow_null=True)

    def validate_visit_date(self, value):
        if value < read_clock().today:
            raise serializers.ValidationError("Visit date cannot be in the past.")
        return value

    def validate(self, attrs):
        if attrs["start_time"] >= attrs["end_time"]:
            raise serializers.ValidationError({"end_time": "End time must be after start time."})
        return attrs


class AccessCodeSerializer(serializers.ModelSerializer):
    start_time = serializers.TimeField(format=HHMM, read_only=True)
    end_time = serializers.TimeField(format=HHMM, read_only=True)
    expires_at = serializers.DateTimeField(source="expiry_instant", read_only=True)
    resident_name = serializers.SerializerMethodField()
    home = serializers.SerializerMethodField()

    class Meta:
        model = AccessCode
        fields = [
            "id",
            "estate_id",
            "code",
            "visit_date",
            "start_time",
            "end_time",
            "expires_at",
            "visitor_name",
            "status",
            "qr_code_data",
            "resident_name",
            "home",
            "used_at",
            "cancelled_at",
            "expired_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_resident_name(self, obj: AccessCode) -> str:
        return display_name(obj.resident)

    def get_home(self, obj: AccessCode):
        membership = getattr(obj.resident, "estate_membership", None)
        home = getattr(membership, "home", None)
        if home is None:
            return None
        return {"name": home.name, "plot_number": home.plot_number, "street": home.street}


class AccessCodeListQuerySerializer(serializers.Serializer):
    status = serializers.ChoiceField(
        choices=["all", *AccessCodeStatus.values],
        required=False,
        default="all",
    )
