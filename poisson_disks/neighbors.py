import numpy as np
from pynndescent import NNDescent
from sklearn import metrics


def _put_self_first(knn_idx):
    """Reorder each row so the point itself comes first, keeping the order of the rest. Rows which do not contain
    the point itself lose their furthest neighbor to make room for it."""
    n, k = knn_idx.shape
    rows = np.arange(n)[:, None]

    is_self = knn_idx == rows
    missing_self = ~is_self.any(axis=1)
    knn_idx[missing_self, -1] = np.arange(n)[missing_self]
    is_self[missing_self, -1] = True

    order = np.argsort(~is_self, axis=1, kind="stable")
    return knn_idx[rows, order]


def exact_neighbors(data, n_neighbors, metric="euclidean"):
    dist = metrics.pairwise_distances(data, data, metric=metric).astype(np.float32, copy=False)
    # Ties between a point and its duplicates should always resolve to the point itself.
    np.fill_diagonal(dist, np.float32(-np.inf))

    rows = np.arange(dist.shape[0])[:, None]
    knn_idx = np.argpartition(dist, n_neighbors - 1, axis=1)[:, :n_neighbors]
    order = np.argsort(dist[rows, knn_idx], axis=1, kind="stable")
    return knn_idx[rows, order]


def approximate_neighbors(data, n_neighbors, metric="euclidean", random_state=None, verbose=False):
    descent = NNDescent(
        data,
        n_neighbors=n_neighbors,
        metric=metric,
        random_state=random_state,
        verbose=verbose)
    knn_idx, _ = descent.neighbor_graph
    return _put_self_first(knn_idx.copy())


def fast_neighbors(
    data: np.ndarray,
    n_neighbors: int,
    metric: str = "euclidean",
    ann_threshold: int = 10_000,
    random_state: int = 66,
    verbose: bool = False,
) -> np.ndarray:
    """Compute the nearest neighbors of every point in data.

    Parameters
    ----------
        data: array, shape (n_samples, n_features)
            Coordinate matrix with one point per row.

        n_neighbors: int
            Number of neighbors per point, the point itself included.

        metric: str (default 'euclidean')
            Distance metric. Its value should be supported by both sklearn and pynndescent.

        ann_threshold: int (default 10_000)
            Data size threshold above which nearest neighbors are approximated with NN-Descent.

        random_state: int (default 66)
            Seed of the approximate search. It does not affect the exact path.

        verbose: bool (default False)
            Print verbose output.

    Returns
    -------
        knn_idx: array, shape (n_samples, n_neighbors)
            Row i holds the neighbors of point i, nearest first, with i itself in the first column.
    """
    data = np.asarray(data)
    if data.ndim != 2:
        raise ValueError(f"Expected a 2D coordinate matrix, got an array with {data.ndim} dimensions.")
    n = data.shape[0]
    if n_neighbors < 1 or n_neighbors > n:
        raise ValueError(
            f"The number of neighbors should be between 1 and the number of points ({n}), given {n_neighbors}."
        )

    if n_neighbors == 1:
        knn_idx = np.arange(n)[:, None]
    elif n <= ann_threshold:
        if verbose:
            print(f"Exact {n_neighbors}-NN (n={n}, metric='{metric}')")
        knn_idx = exact_neighbors(data, n_neighbors, metric=metric)
    else:
        if verbose:
            print(f"PyNNDescent (k={n_neighbors}, n={n}, metric='{metric}')")
        knn_idx = approximate_neighbors(
            data, n_neighbors, metric=metric, random_state=random_state, verbose=verbose
        )

    return knn_idx.astype(np.int64, copy=False)
