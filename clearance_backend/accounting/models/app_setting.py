# accounting/models/app_setting.py

"""
APPLICATION SETTINGS (single row)

Business policy flags read before every payment. Services never read this
row directly; they go through accounting.services.settings_service.
"""

from __future__ import annotations

from django.db import models


class AppSetting(models.Model):
    SINGLETON_ID = "single_row"

    id = models.CharField(primary_key=True, max_length=20, default=SINGLETON_ID, editable=False)

    prevent_negative_treasury = models.BooleanField(default=False)
    prevent_negative_bank = models.BooleanField(default=False)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Application Setting"
        verbose_name_plural = "Application Settings"

    def __str__(self):
        return "Application settings"

    @classmethod
    def load(cls) -> "AppSetting":
        obj, _ = cls.objects.get_or_create(id=cls.SINGLETON_ID)
        return obj
