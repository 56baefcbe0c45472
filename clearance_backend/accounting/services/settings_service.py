# accounting/services/settings_service.py

"""
SETTINGS PROVIDER

Loads the business policy flags once per operation into an immutable
AccountingSettings value. Callers never touch the AppSetting row.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from django.db import transaction

from accounting.models.app_setting import AppSetting
from accounting.services.exceptions import AccountingValidationError

logger = logging.getLogger(__name__)

_FIELDS = ("prevent_negative_treasury", "prevent_negative_bank")


@dataclass(frozen=True)
class AccountingSettings:
    prevent_negative_treasury: bool = False
    prevent_negative_bank: bool = False

    def as_dict(self) -> dict:
        return {name: getattr(self, name) for name in _FIELDS}


def _from_row(row: AppSetting) -> AccountingSettings:
    return AccountingSettings(
        prevent_negative_treasury=bool(row.prevent_negative_treasury),
        prevent_negative_bank=bool(row.prevent_negative_bank),
    )


def get_accounting_settings() -> AccountingSettings:
    return _from_row(AppSetting.load())


@transaction.atomic
def update_accounting_settings(**changes) -> AccountingSettings:
    unknown = set(changes) - set(_FIELDS)
    if unknown:
        raise AccountingValidationError(f"Unknown settings: {', '.join(sorted(unknown))}")

    AppSetting.load()
    row = AppSetting.objects.select_for_update().get(id=AppSetting.SINGLETON_ID)

    for name, value in changes.items():
        if not isinstance(value, bool):
            raise AccountingValidationError(f"{name} must be a boolean")
        setattr(row, name, value)

    if changes:
        row.save(update_fields=[*changes.keys(), "updated_at"])
        logger.info("Accounting settings updated", extra={"changes": changes})

    return _from_row(row)
