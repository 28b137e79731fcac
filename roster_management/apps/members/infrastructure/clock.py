from datetime import date
from django.utils import timezone
from roster_management.apps.members.domain.clock import Clock


class SystemClock(Clock):
    """Today's date in the configured TIME_ZONE."""

    def today(self) -> date:
        return timezone.localdate()
