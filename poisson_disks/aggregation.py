import numpy as np
import pandas as pd
import scipy.sparse as sp


def member_columns(disks):
    return [c for c in disks.columns if c.startswith("cell_")]


def membership_matrix(disks, n_cells):
    """Efficiently build the sparse (n_disks, n_cells) membership matrix of a disk table. Padding entries are
    skipped.

    Parameters
    ----------
        disks: Disk table with member columns cell_1, ..., cell_k holding row positions or <NA>.

        n_cells: Number of rows of the table the member positions point into.

    Returns
    -------
        membership: A csr matrix with a one at (d, c) if cell c is a member of disk d.
    """
    members = disks[member_columns(disks)].to_numpy(dtype="float64", na_value=np.nan)
    disk_idx, slot_idx = np.nonzero(~np.isnan(members))
    cells = members[disk_idx, slot_idx].astype(np.int64)
    return sp.csr_matrix(
        (np.ones(cells.size, dtype="float32"), (disk_idx, cells)), shape=(len(disks), n_cells)
    )


def disk_means(data, disks):
    """Average the embeddings of the members of every disk.

    Parameters
    ----------
        data: Matrix or DataFrame of dimensions (n, f), the table the disks were computed on.

        disks: Disk table as returned by calculate_poisson_disks.

    Returns
    -------
        means: A DataFrame of dimensions (n_disks, f) indexed by disk_id.
    """
    columns = data.columns if isinstance(data, pd.DataFrame) else None
    data = np.asarray(data, dtype=float)

    umat = membership_matrix(disks, data.shape[0])
    sizes = np.asarray(umat.sum(axis=1)).ravel()
    if np.any(sizes == 0):
        raise ValueError("Every disk should have at least one member.")
    means = (umat @ data) / sizes[..., np.newaxis]

    return pd.DataFrame(means, index=pd.Index(disks["disk_id"], name="disk_id"), columns=columns)
