from pathlib import Path

import setuptools

this_directory = Path(__file__).parent
long_description = (this_directory / "README.rst").read_text()

test_dependencies = ["pytest"]


setuptools.setup(
    name="poisson-disks",
    version="0.1.0",
    description="Graph Poisson disk sampling of per donor embeddings into pseudocells.",
    long_description=long_description,
    long_description_content_type="text/x-rst",
    packages=["poisson_disks"],
    classifiers=[
        "Development Status :: 3 - Alpha",
        "License :: OSI Approved :: MIT License",
        "Operating System :: Unix",
        "Operating System :: MacOS",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
    ],
    keywords="poisson disk sampling blue noise nearest neighbors pseudocells single cell",
    install_requires=[
        "pynndescent",
        "scipy",
        "numpy>=1.18",
        "scikit-learn",
        "tqdm",
        "typer",
        "pandas>=1.1",
    ],
    entry_points={"console_scripts": ["poisson-disks=poisson_disks.cli:app"]},
    test_suite="pytest",
    tests_require=test_dependencies,
    extras_require={"test": test_dependencies},
)
