from __future__ import annotations

from datetime import date, datetime, timezone

from .settings import DATE_LAYOUT


class Clock:
    def now_iso(self) -> str:
        return datetime.now(timezone.utc).astimezone().isoformat(timespec="seconds")

    def today(self) -> date:
        return date.today()

    def date_stamp(self) -> str:
        return self.today().strftime(DATE_LAYOUT)
