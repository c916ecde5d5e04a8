import datetime as dt


class SystemClock:
    """Local wall clock."""

    def current_date(self) -> str:
        return dt.date.today().isoformat()

    def current_time(self) -> dt.time:
        return dt.datetime.now().time().replace(microsecond=0)
