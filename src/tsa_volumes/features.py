from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Mapping, Optional

import holidays as holidays_lib
import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

WEEKDAY_LEVELS = ['Sun', 'Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat']
# pandas dayofweek: Monday=0
_DOW_NAMES = ['Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat', 'Sun']


def holiday_calendar(
    years: Iterable[int],
    country: str = 'US',
    observed: bool = False,
    names: Optional[List[str]] = None,
) -> Dict[pd.Timestamp, str]:
    """Holiday dates -> name for ``years``.

    ``observed=False`` keeps the calendar date of each holiday rather than the
    weekday it is observed on. ``names`` keeps only holidays whose name contains
    one of the given substrings (case-insensitive).
    """
    cal = holidays_lib.country_holidays(country, years=sorted(set(int(y) for y in years)), observed=observed)
    out: Dict[pd.Timestamp, str] = {}
    for dt, name in sorted(cal.items()):
        if names and not any(n.lower() in name.lower() for n in names):
            continue
        out[pd.Timestamp(dt).normalize()] = name
    return out


def prepare_model_table(df: pd.DataFrame, keep: str = 'last') -> pd.DataFrame:
    """Sort by Date and drop repeated dates from overlapping source pages."""
    out = df.copy()
    out['Date'] = pd.to_datetime(out['Date'])
    n0 = len(out)
    out = out.drop_duplicates(subset=['Date'], keep=keep)
    if len(out) < n0:
        logger.info('Dropped %d duplicate dates (keep=%s)', n0 - len(out), keep)
    return out.sort_values('Date', kind='mergesort').reset_index(drop=True)


def augment_features(
    df: pd.DataFrame,
    holidays: Mapping,
    window_days: int = 5,
) -> pd.DataFrame:
    """Add calendar and holiday-proximity columns to a ``Date, Numbers`` table.

    Nearest-holiday ties (a date equidistant from two holidays) go to the
    earlier holiday. ``SurroundsHoliday`` is true within ``window_days`` of the
    nearest holiday, excluding the holiday itself.
    """
    if not holidays:
        raise ValueError('holidays must contain at least one date')

    base = df.copy()
    base['Date'] = pd.to_datetime(base['Date'])
    base = base.sort_values('Date', kind='mergesort').reset_index(drop=True)

    d = base['Date'].dt
    base['Year'] = d.year
    base['Weekday'] = pd.Categorical(
        [_DOW_NAMES[i] for i in d.dayofweek],
        categories=WEEKDAY_LEVELS,
        ordered=False,
    )
    base['Day'] = d.day
    base['DayOfYear'] = d.dayofyear
    base['Week'] = (base['DayOfYear'] - 1) // 7 + 1
    base['sin_doy'] = np.sin(2 * np.pi * base['DayOfYear'] / 365.25)
    base['cos_doy'] = np.cos(2 * np.pi * base['DayOfYear'] / 365.25)

    hol = sorted((pd.Timestamp(k).normalize(), v) for k, v in holidays.items())
    hol_dates = np.array([h[0].to_datetime64() for h in hol], dtype='datetime64[D]')
    hol_names = np.array([h[1] for h in hol], dtype=object)

    days = base['Date'].dt.normalize().to_numpy().astype('datetime64[D]')
    # record minus holiday, in days: negative means the holiday is still ahead
    delta = (days[:, None] - hol_dates[None, :]).astype('int64')
    nearest = np.abs(delta).argmin(axis=1)  # first minimum = earlier holiday
    dist = delta[np.arange(len(base)), nearest]

    base['IsHoliday'] = dist == 0
    base['NearestHoliday'] = hol_names[nearest]
    base['DaysToHoliday'] = dist
    base['SurroundsHoliday'] = (np.abs(dist) <= window_days) & (dist != 0)

    return base
