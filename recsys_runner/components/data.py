"""
Text-file data model with the four built-in splitters.

Input format: one interaction per line, ``user item [rating]`` separated by
commas, tabs or spaces.  A missing rating counts as 1.0 (implicit feedback).
Blank lines, ``#`` comments and a header row (non-numeric rating) are skipped.

File location: ``{dfs.data.dir}/{data.input.path}``, or just
``data.input.path`` when ``dfs.data.dir`` is unset.

Splitters (``data.model.splitter``)
-----------------------------------
kcv     Every rating is assigned to one of N folds (N = data.splitter.cv.number)
        by a shuffled round-robin; fold ``data.splitter.cv.index`` (1..N) is
        the test set.
loocv   Each user's ratings are shuffled once; for fold index i (0..N-1) the
        rating at position ``i % len`` is held out.  Users with a single
        rating stay entirely in training.
given   Training from the input file, test from ``data.testset.path``.
ratio   One shuffled split; ``data.splitter.trainset.ratio`` (default 0.8) of
        ratings go to training.

The file is read once.  Fold assignments are drawn once from the job's
random source, so every ``build_data_model()`` after the first only
re-partitions in memory.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Optional

from recsys_runner.components.base import DataModel, RatingMatrix, SplitMode
from recsys_runner.job.registry import register_component

logger = logging.getLogger(__name__)

Rating = tuple[str, str, float]

_SEP = re.compile(r"[\s,]+")


def read_ratings(path: Path) -> list[Rating]:
    """Parse a ratings text file into ``(user, item, rating)`` triples.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
    """
    ratings: list[Rating] = []
    with open(path, encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            parts = _SEP.split(line)
            if len(parts) < 2:
                continue
            if len(parts) == 2:
                ratings.append((parts[0], parts[1], 1.0))
                continue
            try:
                value = float(parts[2])
            except ValueError:
                continue  # header row
            ratings.append((parts[0], parts[1], value))
    return ratings


def to_matrix(ratings: list[Rating]) -> RatingMatrix:
    matrix: RatingMatrix = {}
    for user_id, item_id, value in ratings:
        matrix.setdefault(user_id, {})[item_id] = value
    return matrix


@register_component("data_model", "text")
class TextDataModel(DataModel):
    """Ratings read from a delimited text file, split per fold."""

    def __init__(self, conf, rng=None) -> None:
        super().__init__(conf, rng)
        self._ratings: Optional[list[Rating]] = None
        self._test_ratings: Optional[list[Rating]] = None
        self._mode: Optional[SplitMode] = None
        self._kcv_folds: Optional[list[int]] = None
        self._loocv_order: Optional[dict[str, list[Rating]]] = None
        self._ratio_split: Optional[tuple[list[Rating], list[Rating]]] = None

    @property
    def splitter_kind(self) -> Optional[SplitMode]:
        return self._mode

    def _resolve(self, name: str) -> Path:
        data_dir = self.conf.get_str("dfs.data.dir")
        return Path(data_dir) / name if data_dir else Path(name)

    def _load(self) -> list[Rating]:
        if self._ratings is None:
            input_path = self.conf.get_str("data.input.path")
            if not input_path:
                raise ValueError("data.input.path is not set.")
            path = self._resolve(input_path)
            self._ratings = read_ratings(path)
            logger.info("Loaded %d ratings from %s", len(self._ratings), path)
        return self._ratings

    def build_data_model(self) -> None:
        ratings = self._load()
        self._mode = SplitMode.parse(self.conf.get_str("data.model.splitter"))

        if self._mode is SplitMode.KCV:
            train, test = self._split_kcv(ratings)
        elif self._mode is SplitMode.LOOCV:
            train, test = self._split_loocv(ratings)
        elif self._mode is SplitMode.GIVEN:
            train, test = ratings, self._load_given_test()
        else:
            train, test = self._split_ratio(ratings)

        self.train_matrix = to_matrix(train)
        self.test_matrix = to_matrix(test)
        logger.info(
            "Split %s | train=%d | test=%d",
            self._mode.value, len(train), len(test),
        )

    # ── Splitters ─────────────────────────────────────────────────────────────

    def _cv_index(self, default: int) -> int:
        index = self.conf.get_int("data.splitter.cv.index")
        return default if index is None else index

    def _split_kcv(self, ratings: list[Rating]) -> tuple[list[Rating], list[Rating]]:
        n_folds = self.conf.get_int("data.splitter.cv.number", 1) or 1
        if self._kcv_folds is None or len(self._kcv_folds) != len(ratings):
            positions = list(range(len(ratings)))
            self.rng.shuffle(positions)
            folds = [0] * len(ratings)
            for rank, pos in enumerate(positions):
                folds[pos] = rank % n_folds + 1
            self._kcv_folds = folds

        index = self._cv_index(default=1)
        if not 1 <= index <= n_folds:
            raise ValueError(f"kcv fold index must be in 1..{n_folds}, got {index}.")
        train = [r for r, f in zip(ratings, self._kcv_folds) if f != index]
        test = [r for r, f in zip(ratings, self._kcv_folds) if f == index]
        return train, test

    def _split_loocv(self, ratings: list[Rating]) -> tuple[list[Rating], list[Rating]]:
        if self._loocv_order is None:
            by_user: dict[str, list[Rating]] = {}
            for r in ratings:
                by_user.setdefault(r[0], []).append(r)
            for user_ratings in by_user.values():
                self.rng.shuffle(user_ratings)
            self._loocv_order = by_user

        index = self._cv_index(default=0)
        train: list[Rating] = []
        test: list[Rating] = []
        for user_ratings in self._loocv_order.values():
            if len(user_ratings) < 2:
                train.extend(user_ratings)
                continue
            held_out = index % len(user_ratings)
            for pos, r in enumerate(user_ratings):
                (test if pos == held_out else train).append(r)
        return train, test

    def _load_given_test(self) -> list[Rating]:
        if self._test_ratings is None:
            test_path = self.conf.get_str("data.testset.path")
            if not test_path:
                raise ValueError("data.testset.path is required for the 'given' splitter.")
            self._test_ratings = read_ratings(self._resolve(test_path))
        return self._test_ratings

    def _split_ratio(self, ratings: list[Rating]) -> tuple[list[Rating], list[Rating]]:
        if self._ratio_split is None:
            ratio = self.conf.get_float("data.splitter.trainset.ratio", 0.8)
            if not 0.0 < ratio < 1.0:
                raise ValueError(f"data.splitter.trainset.ratio must be in (0, 1), got {ratio}.")
            shuffled = list(ratings)
            self.rng.shuffle(shuffled)
            cut = int(round(len(shuffled) * ratio))
            self._ratio_split = (shuffled[:cut], shuffled[cut:])
        return self._ratio_split
