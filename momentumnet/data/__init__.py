"""Dataset registry and loader helpers."""

# Ensure built-in datasets register themselves when the package is imported.
from . import training_file as _training_file  # noqa: F401
from . import truth_tables as _truth_tables  # noqa: F401
from .registry import DatasetSpec, available_datasets, get_dataset, register_dataset

__all__ = [
    "DatasetSpec",
    "available_datasets",
    "get_dataset",
    "register_dataset",
]
