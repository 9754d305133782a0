import pickle
import warnings
from dataclasses import asdict, dataclass
from typing import List, Optional, Tuple

import numpy as np
import pandas as pd
from sklearn.base import BaseEstimator
from sklearn.utils import check_random_state
from tqdm import tqdm

from poisson_disks.aggregation import disk_means
from poisson_disks.assignment import MISSING, pad_members, resolve_disk_members
from poisson_disks.coverage import coverage
from poisson_disks.neighbors import fast_neighbors
from poisson_disks.sampling import graph_poisson_disk, random_samples


@dataclass
class GroupReport:
    donor_id: str
    n_cells: int
    n_disks: int
    n_neighbors: int
    random_coverage: Optional[float] = None
    poisson_coverage: Optional[float] = None
    n_random_disks: int = 0
    n_poisson_disks: int = 0
    skipped: bool = False


def disk_columns(n_neighbors):
    return ["donor_id", "disk_id"] + [f"cell_{i}" for i in range(1, n_neighbors + 1)]


def disks_table(donor_id, members, n_neighbors):
    """Rows of the output table for one donor. members holds positions into the full input table."""
    padded = pad_members(members, n_neighbors)
    table = pd.DataFrame(
        {
            column: pd.arrays.IntegerArray(padded[:, j], padded[:, j] == MISSING)
            for j, column in enumerate(disk_columns(n_neighbors)[2:])
        }
    )
    table.insert(0, "donor_id", donor_id)
    table.insert(1, "disk_id", [f"{donor_id}-{i}" for i in range(1, len(members) + 1)])
    return table


def check_inputs(embeddings, donor_ids, n_disks, n_candidates, min_disks):
    embeddings = np.asarray(embeddings, dtype=float)
    donor_ids = np.asarray(donor_ids)

    if embeddings.ndim != 2:
        raise ValueError(f"Expected a 2D embeddings matrix, got an array with {embeddings.ndim} dimensions.")
    if embeddings.shape[0] == 0:
        raise ValueError("The embeddings matrix is empty.")
    if not np.all(np.isfinite(embeddings)):
        raise ValueError("The embeddings contain NaN or infinite values.")
    if donor_ids.ndim != 1 or len(donor_ids) != embeddings.shape[0]:
        raise ValueError(
            f"Expected one donor id per embedding row ({embeddings.shape[0]}), got donor ids of shape "
            f"{donor_ids.shape}."
        )
    if pd.isna(donor_ids).any():
        raise ValueError(f"The donor ids contain {int(pd.isna(donor_ids).sum())} missing values.")
    if n_disks < 1:
        raise ValueError(f"The number of disks should be at least 1, given {n_disks}.")
    if int(round(embeddings.shape[0] / n_disks)) < 1:
        raise ValueError(
            f"Too many disks ({n_disks}) for {embeddings.shape[0]} embeddings, the disk size would round to 0 "
            f"neighbors."
        )
    if n_candidates < 1:
        raise ValueError(f"The number of candidates should be at least 1, given {n_candidates}.")
    if min_disks < 1:
        raise ValueError(f"The minimum number of disks per donor should be at least 1, given {min_disks}.")

    return embeddings, donor_ids


def calculate_poisson_disks(
    embeddings,
    donor_ids,
    n_disks: int,
    n_candidates: int = 100,
    metric: str = "euclidean",
    ann_threshold: int = 10_000,
    knn_random_state: int = 66,
    min_disks: int = 15,
    random_state=None,
    verbose: bool = False,
    progress: bool = False,
) -> Tuple[pd.DataFrame, List[GroupReport]]:
    """Sample Poisson disks on the nearest neighbor graph of every donor.

    Parameters
    ----------
        embeddings: array or DataFrame, shape (n_cells, n_features)
            The embeddings of all cells.

        donor_ids: array, shape (n_cells, )
            The donor of every cell. Donors are processed in order of first appearance.

        n_disks: int
            Target total number of disks. Sets both the number of disks per donor and the disk size.

        n_candidates: int (default 100)
            Size of the candidate pool used when drawing a new disk.

        metric: str (default 'euclidean')
            Distance used to build the nearest neighbor graphs.

        ann_threshold: int (default 10_000)
            Donor size above which nearest neighbors are approximated.

        knn_random_state: int (default 66)
            Seed of the approximate neighbor search. Independent of random_state.

        min_disks: int (default 15)
            Minimum number of disks drawn per donor.

        random_state: None, int or np.random.RandomState (default None)
            Source of all random draws of the sampling and the membership resolution.

        verbose: bool (default False)
            Print per donor diagnostics.

        progress: bool (default False)
            Show a progress bar over the donors.

    Returns
    -------
        disks: DataFrame
            Columns donor_id, disk_id and cell_1, ..., cell_k. Member columns hold positions into embeddings, padded
            with <NA>.

        reports: list of GroupReport
            One report per donor, including the skipped ones.
    """
    embeddings, donor_ids = check_inputs(embeddings, donor_ids, n_disks, n_candidates, min_disks)
    random_state = check_random_state(random_state)

    n_cells = embeddings.shape[0]
    n_neighbors = int(round(n_cells / n_disks))
    donor_id_set = pd.unique(donor_ids)

    tables = []
    reports = []
    for i, donor_id in enumerate(tqdm(donor_id_set, disable=not progress), start=1):
        donor_idxs = np.flatnonzero(donor_ids == donor_id)
        donor_n_disks = max(min_disks, int(round(len(donor_idxs) * n_disks / n_cells)))
        report = GroupReport(str(donor_id), len(donor_idxs), donor_n_disks, n_neighbors)

        if verbose:
            print("----------------")
            print(f"Donor: {donor_id} [{i} / {len(donor_id_set)}]")
            print(f"N. Cells: {len(donor_idxs)}")
            print(f"N. Disks: {donor_n_disks}   N. Neighbors: {n_neighbors}")

        if len(donor_idxs) < n_neighbors:
            warnings.warn(
                f"Skipping donor {donor_id}. Number of neighbors ({n_neighbors}) is greater than number of cells "
                f"({len(donor_idxs)}). Please adjust the number of disks."
            )
            report.skipped = True
            reports.append(report)
            continue

        neighbors = fast_neighbors(
            embeddings[donor_idxs],
            n_neighbors,
            metric=metric,
            ann_threshold=ann_threshold,
            random_state=knn_random_state,
        )

        baseline = random_samples(random_state, len(donor_idxs), donor_n_disks)
        poisson = graph_poisson_disk(random_state, neighbors, donor_n_disks, n_candidates=n_candidates)

        report.random_coverage = coverage(baseline, neighbors)
        report.poisson_coverage = coverage(poisson, neighbors)
        if verbose:
            print(f"Random Coverage: {report.random_coverage:.4f}")
            print(f"Poisson Coverage: {report.poisson_coverage:.4f}")

        random_members = resolve_disk_members(random_state, donor_idxs[neighbors[baseline]])
        poisson_members = resolve_disk_members(random_state, donor_idxs[neighbors[poisson]])
        report.n_random_disks = len(random_members)
        report.n_poisson_disks = len(poisson_members)

        tables.append(disks_table(str(donor_id), poisson_members, n_neighbors))
        reports.append(report)

    if verbose:
        print("----------------")

    if not tables:
        empty = pd.DataFrame(columns=disk_columns(n_neighbors))
        return empty.astype({c: "Int64" for c in empty.columns[2:]}), reports

    return pd.concat(tables, ignore_index=True), reports


class PoissonDisks(BaseEstimator):
    """Graph Poisson disk sampling of per donor embeddings

    Selects an evenly spread set of disks (pseudocells) per donor on a k-nearest neighbor graph and assigns every
    neighbor of a selected disk to exactly one disk.

    Parameters
    ----------
    n_disks: int (default 1000)
        Target total number of disks over all donors. The disk size is round(n_cells / n_disks).

    n_candidates: int (default 100)
        Size of the candidate pool drawn when selecting a new disk.

    metric: str (default 'euclidean')
        Distance used to build the nearest neighbor graphs. Its value should be supported by both sklearn and
        pynndescent.

    ann_threshold: int (default 10_000)
        Donor size above which approximate nearest neighbors are computed instead of exact ones.

    knn_random_state: int (default 66)
        Seed of the approximate nearest neighbor search.

    min_disks: int (default 15)
        Minimum number of disks per donor.

    random_state: Optional[int] (default None)
        Seed of the sampling and membership resolution.

    Attributes
    ----------
    disks_: Optional[pd.DataFrame]
        The disk table of the last fit.

    group_reports_: Optional[List[GroupReport]]
        Per donor diagnostics of the last fit.
    """

    def __init__(
        self,
        n_disks: int = 1000,
        n_candidates: int = 100,
        metric: str = "euclidean",
        ann_threshold: int = 10_000,
        knn_random_state: int = 66,
        min_disks: int = 15,
        random_state: Optional[int] = None,
    ):
        self.n_disks = n_disks
        self.n_candidates = n_candidates
        self.metric = metric
        self.ann_threshold = ann_threshold
        self.knn_random_state = knn_random_state
        self.min_disks = min_disks
        self.random_state = random_state

        self.disks_: Optional[pd.DataFrame] = None
        self.group_reports_: Optional[List[GroupReport]] = None

    def fit(self, X, y, verbose: bool = False, progress: bool = False):
        """
        Sample the disks of every donor.

        Parameters
        ----------
        X: array, shape (n_samples, n_features)
            The embeddings.

        y: array, shape (n_samples, )
            The donor of every row of X.

        verbose: bool (default False)
            If true, print per donor diagnostics.

        progress: bool (default False)
            If true, show a progress bar over the donors.
        """
        self.disks_, self.group_reports_ = calculate_poisson_disks(
            X,
            y,
            n_disks=self.n_disks,
            n_candidates=self.n_candidates,
            metric=self.metric,
            ann_threshold=self.ann_threshold,
            knn_random_state=self.knn_random_state,
            min_disks=self.min_disks,
            random_state=self.random_state,
            verbose=verbose,
            progress=progress,
        )
        return self

    def fit_transform(self, X, y, verbose: bool = False, progress: bool = False):
        return self.fit(X, y, verbose=verbose, progress=progress).disks_

    def reports(self) -> pd.DataFrame:
        if self.group_reports_ is None:
            raise ValueError("No reports available as the disks have not been fitted on a dataset.")
        return pd.DataFrame([asdict(r) for r in self.group_reports_])

    def aggregate(self, X) -> pd.DataFrame:
        if self.disks_ is None:
            raise ValueError("Unable to aggregate as the disks have not been fitted on a dataset.")
        return disk_means(X, self.disks_)

    def save(self, path):
        with open(path, "wb") as f:
            pickle.dump(self, f, pickle.HIGHEST_PROTOCOL)

    @staticmethod
    def load(path):
        with open(path, "rb") as f:
            return pickle.load(f)
