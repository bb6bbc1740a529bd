from django.db import models


class SystemSetting(models.Model):
    """
    Runtime-editable key/value settings (edited in the Django admin).

    Keys read by booking.services.slot_utils:
      - BUSINESS_OPEN          first bookable start, e.g. '09:00'
      - BUSINESS_LAST_SLOT     last bookable start, e.g. '20:30'
      - SLOT_INTERVAL_MINUTES  grid step, e.g. '15'
    Values are stored as text; callers parse and validate them.
    """
    key = models.CharField(max_length=100, unique=True)
    value = models.CharField(max_length=200)

    class Meta:
        ordering = ["key"]

    def __str__(self):
        return f"{self.key}={self.value}"

    @classmethod
    def values_for(cls, keys):
        """{key: value} for the keys that have a row; missing keys are left out."""
        return dict(cls.objects.filter(key__in=list(keys)).values_list("key", "value"))
