from datetime import date, timedelta

# Python weekday numbering: Monday=0 .. Sunday=6
WEEKDAY_MAP = {
    "monday": 0,
    "tuesday": 1,
    "wednesday": 2,
    "thursday": 3,
    "friday": 4,
    "saturday": 5,
    "sunday": 6,
}


def add_days(today: date, days: int) -> date:
    """Return today shifted by a number of days. Raises OverflowError past year 9999."""
    return today + timedelta(days=days)


def next_weekday(today: date, weekday_name: str) -> date:
    """
    Resolve a weekday name to its next occurrence after today.
    If today is that weekday, the result is one week later, never today.
    """
    target = WEEKDAY_MAP[weekday_name.lower()]
    days_ahead = (target - today.weekday() + 7) % 7
    if days_ahead == 0:
        days_ahead = 7
    return add_days(today, days_ahead)
