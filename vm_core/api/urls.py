# vm_core/api/urls.py
from __future__ import annotations

from django.urls import path
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from vm_core.access_codes.api.views import AccessCodeViewSet
from vm_core.gate.api.views import DashboardView, EntryLogViewSet, GateViewSet

router = DefaultRouter()

router.register(r"codes", AccessCodeViewSet, basename="codes")
router.register(r"gate", GateViewSet, basename="gate")
router.register(r"entry-logs", EntryLogViewSet, basename="entry-logs")

urlpatterns = [
    # Auth
    path("auth/login/", TokenObtainPairView.as_view(), name="login"),
    path("auth/refresh/", TokenRefreshView.as_view(), name="refresh"),

    path("dashboard/", DashboardView.as_view(), name="dashboard"),

    # Router URLs last (so explicit paths win if ever overlapping)
    *router.urls,
]
