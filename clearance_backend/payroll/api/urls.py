# payroll/api/urls.py

from django.urls import path

from payroll.api.views import (
    PayrollRunApproveView,
    PayrollRunDetailView,
    PayrollRunListCreateView,
    PayrollRunUnapproveView,
)

urlpatterns = [
    path("runs/", PayrollRunListCreateView.as_view(), name="payroll-runs"),
    path("runs/<uuid:run_id>/", PayrollRunDetailView.as_view(), name="payroll-run-detail"),
    path(
        "runs/<uuid:run_id>/approve/",
        PayrollRunApproveView.as_view(),
        name="payroll-run-approve",
    ),
    path(
        "runs/<uuid:run_id>/unapprove/",
        PayrollRunUnapproveView.as_view(),
        name="payroll-run-unapprove",
    ),
]
