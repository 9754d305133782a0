from typing import Sequence, Tuple

import numpy as np

# GRAPHS


def hub_graph(n_nodes: int = 20, n_hubs: int = 4) -> np.ndarray:
    """Neighbor lists with k = n_hubs + 1 where every node is connected to the same hubs 0, ..., n_hubs - 1. Once
    the first sample is drawn there are no fresh candidates left, so every following draw goes through the overlap
    fallback and covers a single new node."""
    core = list(range(n_hubs + 1))
    neighbors = []
    for i in range(n_nodes):
        if i <= n_hubs:
            neighbors.append([i] + [j for j in core if j != i])
        else:
            neighbors.append([i] + core[:-1])
    return np.array(neighbors)


def ring_graph(n_nodes: int, k: int) -> np.ndarray:
    return (np.arange(n_nodes)[:, None] + np.arange(k)[None, :]) % n_nodes


def random_graph(random_state: np.random.RandomState, n_nodes: int, k: int) -> np.ndarray:
    neighbors = np.empty((n_nodes, k), dtype=np.int64)
    for i in range(n_nodes):
        others = np.delete(np.arange(n_nodes), i)
        neighbors[i, 0] = i
        neighbors[i, 1:] = random_state.choice(others, size=k - 1, replace=False)
    return neighbors


# DATASETS


def donor_dataset(
    sizes: Sequence[int], n_features: int = 2, seed: int = 636
) -> Tuple[np.ndarray, np.ndarray]:
    """Gaussian blobs, one per donor, with donors named donor_0, donor_1, ... and rows grouped by donor."""
    random_state = np.random.RandomState(seed)
    embeddings = np.vstack(
        [random_state.normal(loc=3 * i, size=(size, n_features)) for i, size in enumerate(sizes)]
    )
    donor_ids = np.repeat([f"donor_{i}" for i in range(len(sizes))], sizes)
    return embeddings, donor_ids


def member_values(disks) -> np.ndarray:
    members = disks[[c for c in disks.columns if c.startswith("cell_")]].to_numpy(
        dtype="float64", na_value=np.nan
    )
    return members[~np.isnan(members)].astype(np.int64)
