from typing import List

import numpy as np
import scipy.sparse as sp
from sklearn.utils import check_random_state

MISSING = -1


def claim_matrix(disk_neighbors, n_nodes=None):
    """Sparse (n_nodes, n_disks) matrix with a nonzero at (m, d) whenever node m is in the neighbor list of the d-th
    disk. Disks are numbered by their position in disk_neighbors, not by their node index."""
    disk_neighbors = np.asarray(disk_neighbors, dtype=np.int64)
    n_disks, k = disk_neighbors.shape
    if n_nodes is None:
        n_nodes = int(disk_neighbors.max()) + 1 if disk_neighbors.size else 0

    nodes = disk_neighbors.ravel()
    disks = np.repeat(np.arange(n_disks), k)
    claims = sp.csr_matrix(
        (np.ones(nodes.size, dtype=np.int8), (nodes, disks)), shape=(n_nodes, n_disks)
    )
    claims.sum_duplicates()
    claims.sort_indices()
    return claims


def resolve_disk_members(random_state, disk_neighbors) -> List[np.ndarray]:
    """Split the nodes claimed by a sequence of disks into disjoint membership lists.

    A node found in the neighbor lists of several disks is given to one of them, drawn uniformly. Nodes are
    resolved in ascending order so the result only depends on the state of the random generator.

    Parameters
    ----------
        random_state: None, int or np.random.RandomState
            Source of the tie-breaking draws.

        disk_neighbors: array, shape (n_disks, k)
            The neighbor lists of the selected disks, in order of selection.

    Returns
    -------
        members: list of arrays
            Sorted member nodes per disk. Disks left without members are dropped, the rest keep their order.
    """
    random_state = check_random_state(random_state)
    claims = claim_matrix(disk_neighbors)
    n_nodes, n_disks = claims.shape

    n_claims = np.diff(claims.indptr)
    claimed_nodes = np.flatnonzero(n_claims)
    counts = n_claims[claimed_nodes]

    offsets = np.minimum((random_state.random_sample(counts.size) * counts).astype(np.int64), counts - 1)
    owners = claims.indices[claims.indptr[claimed_nodes] + offsets]

    membership = sp.csr_matrix(
        (np.ones(claimed_nodes.size, dtype=np.int8), (owners, claimed_nodes)), shape=(n_disks, n_nodes)
    )
    membership.sort_indices()

    members = [
        membership.indices[start:end].astype(np.int64)
        for start, end in zip(membership.indptr[:-1], membership.indptr[1:])
    ]
    return [m for m in members if m.size > 0]


def pad_members(members, width, fill=MISSING):
    """Stack membership lists into an (n_disks, width) array, filling the remaining slots with `fill`."""
    padded = np.full((len(members), width), fill, dtype=np.int64)
    for i, m in enumerate(members):
        if len(m) > width:
            raise ValueError(f"Disk {i} has {len(m)} members, more than the width {width}.")
        padded[i, :len(m)] = m
    return padded
