"""Fit quality for models trained on ``log1p(Numbers)``.

Every split is scored twice: on the log scale the regressors actually fit, and
on passenger counts, which is what a reader of the comparison table cares about.
"""
from __future__ import annotations

from typing import Dict

import numpy as np


def counts_from_log(y_log) -> np.ndarray:
    """Back-transform log1p predictions to passenger counts (never negative)."""
    return np.clip(np.expm1(np.asarray(y_log, dtype=float)), 0, None)


def error_summary(actual, predicted, eps: float = 1e-9) -> Dict[str, float]:
    actual = np.asarray(actual, dtype=float)
    predicted = np.asarray(predicted, dtype=float)
    err = predicted - actual
    abs_err = np.abs(err)
    return {
        'RMSE': float(np.sqrt(np.mean(err ** 2))),
        'MAE': float(np.mean(abs_err)),
        'MAPE_%': float(100.0 * np.mean(abs_err / np.maximum(np.abs(actual), eps))),
        'sMAPE_%': float(100.0 * np.mean(2.0 * abs_err / np.maximum(np.abs(actual) + np.abs(predicted), eps))),
    }


def score_split(split: str, counts, y_log_pred) -> Dict[str, float]:
    """``{split}_log_*`` and ``{split}_count_*`` errors for one split.

    ``counts`` are the observed ``Numbers``; ``y_log_pred`` is the model output.
    """
    counts = np.asarray(counts, dtype=float)
    scales = (
        ('log', np.log1p(counts), y_log_pred),
        ('count', counts, counts_from_log(y_log_pred)),
    )
    scores: Dict[str, float] = {}
    for scale, actual, predicted in scales:
        for name, value in error_summary(actual, predicted).items():
            scores[f'{split}_{scale}_{name}'] = value
    return scores
