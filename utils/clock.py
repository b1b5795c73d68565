from datetime import datetime

DATE_FMT = "%Y-%m-%d"
TIME_FMT = "%H:%M"


def local_now() -> datetime:
    # Slot dates and times are naive local values, so "now" is too.
    return datetime.now()


def today_str(now: datetime) -> str:
    return now.strftime(DATE_FMT)


def minute_of_day(now: datetime) -> int:
    return now.hour * 60 + now.minute


def slot_datetime(date_str: str, time_str: str) -> datetime:
    return datetime.strptime(f"{date_str} {time_str}", f"{DATE_FMT} {TIME_FMT}")


def is_valid_date(value) -> bool:
    try:
        datetime.strptime(value, DATE_FMT)
    except (TypeError, ValueError):
        return False
    return True


def is_valid_time(value) -> bool:
    # Strict zero-padded HH:MM so string ordering matches clock ordering
    if not isinstance(value, str) or len(value) != 5:
        return False
    try:
        datetime.strptime(value, TIME_FMT)
    except ValueError:
        return False
    return True
