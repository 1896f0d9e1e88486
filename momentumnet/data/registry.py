"""Dataset registry and metadata contracts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, MutableMapping, Tuple

from ..core.types import Sample


@dataclass(frozen=True)
class DatasetSpec:
    """A named, fully materialised list of training samples.

    Attributes
    ----------
    name:
        Registry key the dataset was resolved from.
    samples:
        Input/target pairs in presentation order.
    topology_hint:
        Layer sizes the data implies. At minimum ``(n_inputs, n_outputs)``;
        training files may declare hidden layers too.
    provenance:
        Free-form metadata recorded with each run for reproducibility.
    """

    name: str
    samples: List[Sample]
    topology_hint: Tuple[int, ...]
    provenance: Dict[str, Any] = field(default_factory=dict)

    @property
    def d_in(self) -> int:
        return self.topology_hint[0]

    @property
    def d_out(self) -> int:
        return self.topology_hint[-1]


DatasetFactory = Callable[..., DatasetSpec]


_REGISTRY: MutableMapping[str, DatasetFactory] = {}


def register_dataset(
    name: str | None = None,
    factory: DatasetFactory | None = None,
) -> Callable[[DatasetFactory], DatasetFactory] | DatasetFactory:
    """Register a dataset factory, either as a decorator or directly."""

    def _decorator(func: DatasetFactory) -> DatasetFactory:
        _REGISTRY[str(name or func.__name__)] = func
        return func

    if factory is not None:
        return _decorator(factory)
    if name is None:
        raise TypeError("register_dataset requires a name when used without a decorator")
    return _decorator


def get_dataset(dataset: str, /, **options: Any) -> DatasetSpec:
    """Return the :class:`DatasetSpec` for ``dataset``."""

    if dataset not in _REGISTRY:
        available = ", ".join(available_datasets())
        raise KeyError(f"Unknown dataset {dataset!r}. Available datasets: {available}")

    spec = _REGISTRY[dataset](**options)
    _validate_spec(spec)
    return spec


def available_datasets() -> Iterable[str]:
    """Return the sorted list of available dataset identifiers."""

    return sorted(_REGISTRY)


def _validate_spec(spec: DatasetSpec) -> None:
    if not spec.samples:
        raise ValueError(f"Dataset {spec.name!r} has no samples")
    for position, sample in enumerate(spec.samples):
        if len(sample.inputs) != spec.d_in or len(sample.targets) != spec.d_out:
            raise ValueError(
                f"Dataset {spec.name!r} sample {position} has shape "
                f"{len(sample.inputs)}->{len(sample.targets)}, "
                f"expected {spec.d_in}->{spec.d_out}"
            )


__all__ = [
    "DatasetSpec",
    "available_datasets",
    "get_dataset",
    "register_dataset",
]
