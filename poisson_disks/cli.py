from pathlib import Path
from typing import Optional

import pandas as pd
import typer

from poisson_disks.aggregation import disk_means
from poisson_disks.disks import PoissonDisks

app = typer.Typer(add_completion=False)


def load_embeddings(input_path: Path, donor_column: str):
    table = pd.read_csv(input_path)
    if donor_column not in table.columns:
        raise typer.BadParameter(
            f"Column '{donor_column}' not found in {input_path}. Available columns: {', '.join(table.columns)}.",
            param_hint="--donor-column",
        )

    donor_ids = table[donor_column].astype(str).to_numpy()
    embeddings = table.drop(columns=[donor_column])
    non_numeric = [c for c in embeddings.columns if not pd.api.types.is_numeric_dtype(embeddings[c])]
    if non_numeric:
        raise typer.BadParameter(
            f"Embedding columns should be numeric, found: {', '.join(non_numeric)}.", param_hint="INPUT_PATH"
        )

    return embeddings, donor_ids


@app.command()
def main(
    input_path: Path = typer.Argument(..., exists=True, dir_okay=False),
    output_path: Path = typer.Argument(...),
    n_disks: int = typer.Option(..., min=1),
    donor_column: str = "donor_id",
    n_candidates: int = typer.Option(100, min=1),
    metric: str = "euclidean",
    ann_threshold: int = 10_000,
    knn_random_state: int = 66,
    min_disks: int = typer.Option(15, min=1),
    random_state: Optional[int] = None,
    means_output: Optional[Path] = None,
    verbose: bool = False,
    progress: bool = False,
):
    """Sample Poisson disks per donor from an embeddings CSV and write the disk table as CSV."""
    embeddings, donor_ids = load_embeddings(input_path, donor_column)
    if verbose:
        print(f"Loaded {len(embeddings)} cells of {len(set(donor_ids))} donors from {input_path}.")

    poisson_disks = PoissonDisks(
        n_disks=n_disks,
        n_candidates=n_candidates,
        metric=metric,
        ann_threshold=ann_threshold,
        knn_random_state=knn_random_state,
        min_disks=min_disks,
        random_state=random_state,
    )
    disks = poisson_disks.fit_transform(embeddings, donor_ids, verbose=verbose, progress=progress)

    disks.to_csv(output_path, index=False)
    if verbose:
        print(f"Saved {len(disks)} disks to {output_path}.")

    if means_output is not None:
        disk_means(embeddings, disks).to_csv(means_output)
        if verbose:
            print(f"Saved disk means to {means_output}.")


if __name__ == "__main__":
    app()
