"""Boolean truth-table datasets and the single fixed pair dataset."""

from __future__ import annotations

from typing import Callable, Dict, Sequence

from ..core.types import Sample
from .registry import DatasetSpec, register_dataset

BooleanFn = Callable[[int, int], int]

FUNCTIONS: Dict[str, BooleanFn] = {
    "xor": lambda a, b: a ^ b,
    "and": lambda a, b: a & b,
    "or": lambda a, b: a | b,
}


def truth_table(name: str) -> list[Sample]:
    """Return the four rows of the two-input boolean function ``name``."""

    try:
        fn = FUNCTIONS[name]
    except KeyError as exc:
        raise KeyError(f"Unknown boolean function: {name}") from exc
    return [
        Sample.of((a, b), (fn(a, b),))
        for a in (0, 1)
        for b in (0, 1)
    ]


def _truth_table_factory(name: str):
    def factory(repeat: int = 1, **_: object) -> DatasetSpec:
        if repeat < 1:
            raise ValueError(f"repeat must be at least 1, got {repeat}")
        return DatasetSpec(
            name=name,
            samples=truth_table(name) * int(repeat),
            topology_hint=(2, 1),
            provenance={"type": "truth_table", "function": name, "repeat": int(repeat)},
        )

    factory.__name__ = f"make_{name}"
    return factory


for _name in FUNCTIONS:
    register_dataset(_name, _truth_table_factory(_name))


@register_dataset("single-pair")
def make_single_pair(
    inputs: Sequence[float] = (1.0, 0.0),
    targets: Sequence[float] = (1.0,),
    **_: object,
) -> DatasetSpec:
    """One fixed input/target pair, presented once per epoch."""

    sample = Sample.of(inputs, targets)
    return DatasetSpec(
        name="single-pair",
        samples=[sample],
        topology_hint=(len(sample.inputs), len(sample.targets)),
        provenance={
            "type": "single_pair",
            "inputs": list(sample.inputs),
            "targets": list(sample.targets),
        },
    )


__all__ = ["FUNCTIONS", "make_single_pair", "truth_table"]
