from __future__ import annotations

from typing import List

import pandas as pd

from .metrics import counts_from_log
from .modeling import default_features, design_matrix


def fit_and_predict(
    model,
    train: pd.DataFrame,
    test: pd.DataFrame,
    features: List[str] | None = None,
    target: str = 'y',
    count_col: str = 'Numbers',
) -> pd.DataFrame:
    """Fit on train and return tidy fitted (train) and predicted (test) counts with residuals."""
    features = features or default_features()

    model.fit(design_matrix(train, features), train[target].to_numpy(dtype=float))

    parts = []
    for split, frame in (('train', train), ('test', test)):
        if frame.empty:
            continue
        parts.append(pd.DataFrame({
            'split': split,
            'Date': pd.to_datetime(frame['Date']).to_numpy(),
            'y_true': frame[target].to_numpy(dtype=float),
            'y_pred': model.predict(design_matrix(frame, features)),
            'count_true': frame[count_col].to_numpy(dtype=float),
        }))

    pred = pd.concat(parts, ignore_index=True)
    pred['count_pred'] = counts_from_log(pred['y_pred'])
    pred['residual'] = pred['count_true'] - pred['count_pred']
    return pred
