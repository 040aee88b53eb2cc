from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List

import pandas as pd


ON_ROW_ERROR_CHOICES = ('abort', 'skip', 'collect')


@dataclass(frozen=True)
class ProjectConfig:
    # Source pages
    base_url: str = 'https://www.tsa.gov/travel/passenger-volumes'
    years: List[int] = field(default_factory=lambda: list(range(2019, 2024)))
    table_index: int = 0

    # HTTP
    timeout_seconds: float = 30.0
    user_agent: str = 'tsa-volumes/0.1 (+https://www.tsa.gov/travel/passenger-volumes)'
    max_workers: int = 1

    # Row errors: abort | skip | collect
    on_row_error: str = 'abort'

    # Paths (repo-relative by default)
    dataset_out_path: Path = Path('data/raw/tsa_passenger_volumes.csv')
    features_out_path: Path = Path('data/processed/tsa_model_table.csv.gz')
    reports_dir: Path = Path('reports/models')

    # Features
    holiday_window_days: int = 5
    holiday_country: str = 'US'

    # Modeling
    test_start: pd.Timestamp = pd.Timestamp('2023-01-01')
    seed: int = 7
    n_jobs: int = -1
