import numpy as np
from sklearn.utils import check_random_state


def _unique_in_order(values):
    _, first_idx = np.unique(values, return_index=True)
    return values[np.sort(first_idx)]


def random_samples(random_state, n_nodes, n_samples):
    """Uniform baseline: draw n_samples nodes with replacement."""
    random_state = check_random_state(random_state)
    return random_state.randint(0, n_nodes, size=n_samples)


def graph_poisson_disk(random_state, neighbors, n_samples, n_candidates=100):
    """Poisson disk samples on the graph defined by the neighbor lists.

    Nodes are added greedily. On every step a pool of candidates is drawn from the nodes not yet covered by a
    sample and the candidate whose neighborhood overlaps the least with the covered territory is selected.
    Candidates without any overlap are preferred; when none exist, the whole pool competes.

    Parameters
    ----------
        random_state: None, int or np.random.RandomState
            Source of all the random draws.

        neighbors: array, shape (n_nodes, k)
            Row i holds the neighbors of node i, the node itself included.

        n_samples: int
            Number of samples to draw. Fewer are returned if the available nodes run out first.

        n_candidates: int (default 100)
            Number of candidates drawn, with replacement, when choosing a new sample.

    Returns
    -------
        samples: array, shape (<= n_samples, )
            Indices of the distinct sampled nodes in order of selection.
    """
    if n_samples < 1:
        raise ValueError(f"The number of samples should be at least 1, given {n_samples}.")
    if n_candidates < 1:
        raise ValueError(f"The number of candidates should be at least 1, given {n_candidates}.")

    random_state = check_random_state(random_state)
    neighbors = np.asarray(neighbors, dtype=np.int64)
    n_nodes, k = neighbors.shape

    sample = random_state.randint(0, n_nodes)
    samples = [sample]

    available = np.ones(n_nodes, dtype=bool)
    available[sample] = False

    included = np.zeros(n_nodes, dtype=bool)
    included[neighbors[sample]] = True

    while len(samples) < n_samples and available.any():
        pool = np.flatnonzero(available)
        drawn_candidates = _unique_in_order(random_state.choice(pool, size=n_candidates, replace=True))

        overlaps = included[neighbors[drawn_candidates]].sum(axis=1)
        fresh = overlaps == 0

        if fresh.any():
            candidates, overlaps = drawn_candidates[fresh], overlaps[fresh]
        else:
            candidates = drawn_candidates

        density = overlaps / k
        new_sample = candidates[np.argmin(density)]

        samples.append(new_sample)
        available[neighbors[new_sample]] = False
        included[neighbors[new_sample]] = True

    return np.array(samples, dtype=np.int64)
