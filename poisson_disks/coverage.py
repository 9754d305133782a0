import numpy as np


def coverage(samples, neighbors):
    """Fraction of the graph nodes which are neighbors of at least one of the samples.

    Parameters
    ----------
        samples: Indices of the sampled nodes.

        neighbors: Neighbor lists of all graph nodes in the form of an (n, k) array.

    Returns
    -------
        coverage: A float in [1/n, 1] for a non-empty sample.
    """
    neighbors = np.asarray(neighbors)
    samples = np.asarray(samples, dtype=np.int64)
    included = np.unique(neighbors[samples])
    return included.size / len(neighbors)
