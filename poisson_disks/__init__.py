from poisson_disks.aggregation import disk_means
from poisson_disks.assignment import MISSING, pad_members, resolve_disk_members
from poisson_disks.coverage import coverage
from poisson_disks.disks import GroupReport, PoissonDisks, calculate_poisson_disks
from poisson_disks.neighbors import fast_neighbors
from poisson_disks.sampling import graph_poisson_disk, random_samples
