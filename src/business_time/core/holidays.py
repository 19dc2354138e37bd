"""
Colombian holiday data.

Embedded fallback table used when the holiday source is unavailable,
plus helpers to turn date strings into holiday sets.
"""

from datetime import date, datetime
from typing import FrozenSet, Iterable, List, Optional, Union


HolidaySet = FrozenSet[date]


# Official Colombian calendar, with Ley Emiliani moves to Monday applied.
FALLBACK_COLOMBIAN_HOLIDAYS: List[str] = [
    # 2024
    "2024-01-01",  # Año Nuevo
    "2024-01-08",  # Reyes Magos
    "2024-03-25",  # San José
    "2024-03-28",  # Jueves Santo
    "2024-03-29",  # Viernes Santo
    "2024-05-01",  # Día del Trabajo
    "2024-05-13",  # Ascensión
    "2024-06-03",  # Corpus Christi
    "2024-06-10",  # Sagrado Corazón
    "2024-07-01",  # San Pedro y San Pablo
    "2024-07-20",  # Independencia
    "2024-08-07",  # Batalla de Boyacá
    "2024-08-19",  # Asunción de la Virgen
    "2024-10-14",  # Día de la Raza
    "2024-11-04",  # Todos los Santos
    "2024-11-11",  # Independencia de Cartagena
    "2024-12-08",  # Inmaculada Concepción
    "2024-12-25",  # Navidad
    # 2025
    "2025-01-01",
    "2025-01-06",
    "2025-03-24",
    "2025-04-17",
    "2025-04-18",
    "2025-05-01",
    "2025-06-02",
    "2025-06-23",
    "2025-06-30",  # Sagrado Corazón and San Pedro y San Pablo
    "2025-07-20",
    "2025-08-07",
    "2025-08-18",
    "2025-10-13",
    "2025-11-03",
    "2025-11-17",
    "2025-12-08",
    "2025-12-25",
    # 2026
    "2026-01-01",
    "2026-01-12",
    "2026-03-23",
    "2026-04-02",
    "2026-04-03",
    "2026-05-01",
    "2026-05-18",
    "2026-06-08",
    "2026-06-15",
    "2026-06-29",
    "2026-07-20",
    "2026-08-07",
    "2026-08-17",
    "2026-10-12",
    "2026-11-02",
    "2026-11-16",
    "2026-12-08",
    "2026-12-25",
    # 2027
    "2027-01-01",
    "2027-01-11",
    "2027-03-22",
    "2027-03-25",
    "2027-03-26",
    "2027-05-01",
    "2027-05-10",
    "2027-05-31",
    "2027-06-07",
    "2027-07-05",
    "2027-07-20",
    "2027-08-07",
    "2027-08-16",
    "2027-10-18",
    "2027-11-01",
    "2027-11-15",
    "2027-12-08",
    "2027-12-25",
]


def get_fallback_holidays(
    start_year: Optional[int] = None,
    end_year: Optional[int] = None,
) -> List[str]:
    """
    Get fallback holidays filtered by an inclusive year range.

    Args:
        start_year: First year to include, or None for no lower bound.
        end_year: Last year to include, or None for no upper bound.

    Returns:
        Matching holiday strings, in table order.
    """
    if start_year is None and end_year is None:
        return list(FALLBACK_COLOMBIAN_HOLIDAYS)

    selected = []
    for holiday in FALLBACK_COLOMBIAN_HOLIDAYS:
        year = int(holiday[:4])
        if start_year is not None and year < start_year:
            continue
        if end_year is not None and year > end_year:
            continue
        selected.append(holiday)
    return selected


def parse_holiday_dates(values: Iterable[str]) -> HolidaySet:
    """
    Build a holiday set from YYYY-MM-DD strings.

    Raises:
        ValueError: If a value is not an ISO calendar date.
    """
    return frozenset(date.fromisoformat(value) for value in values)


def is_holiday(check_date: Union[datetime, date], holidays: HolidaySet) -> bool:
    """
    Check whether the calendar date of check_date is in the holiday set.

    A civil datetime is compared by its own (civil) calendar date.
    """
    if isinstance(check_date, datetime):
        check_date = check_date.date()
    return check_date in holidays
