from __future__ import annotations

import logging
from typing import Callable, List, NamedTuple, Optional

import numpy as np

from .errors import NoCandidateError


LOGGER = logging.getLogger("stegano_wavelet")

Metric = Callable[[np.ndarray, np.ndarray], np.ndarray]


class Match(NamedTuple):
    index: int
    error: float


def rmse_to_many(target: np.ndarray, candidates: np.ndarray) -> np.ndarray:
    """Block RMSE between ``target`` (4, 3) and every block of ``candidates`` (N, 4, 3).

    Per channel: root of the mean squared difference over the four corners.
    The result is the mean of the three channel errors.
    """
    diff = np.asarray(candidates, dtype=np.float64) - np.asarray(target, dtype=np.float64)
    per_channel = np.sqrt(np.mean(diff ** 2, axis=-2))
    return per_channel.mean(axis=-1)


def block_rmse(first: np.ndarray, second: np.ndarray) -> float:
    return float(rmse_to_many(first, np.asarray(second)[None, ...])[0])


def nearest(
    target: np.ndarray,
    candidates: np.ndarray,
    metric: Metric = rmse_to_many,
    available: Optional[np.ndarray] = None,
) -> Match:
    """Find the candidate with the smallest error; ties go to the lowest index.

    ``available`` is an optional boolean mask; masked-out candidates are skipped.
    """
    if len(candidates) == 0:
        raise NoCandidateError("No candidate blocks to match against")
    errors = metric(target, candidates)
    if available is not None:
        if not np.any(available):
            raise NoCandidateError("Every candidate block is already taken")
        errors = np.where(available, errors, np.inf)
    # argmin returns the first minimum, which gives the (error, index) order
    index = int(np.argmin(errors))
    return Match(index, float(errors[index]))


def find_best_match(target: np.ndarray, candidates: np.ndarray) -> int:
    return nearest(target, candidates).index


def match_all(targets: np.ndarray, candidates: np.ndarray) -> List[int]:
    """Best candidate index for every target, each found independently."""
    indices = [find_best_match(target, candidates) for target in targets]
    LOGGER.debug("Matched %d blocks against %d candidates", len(indices), len(candidates))
    return indices
