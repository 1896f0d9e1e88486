"""Deterministic per-sample training loop."""

from __future__ import annotations

import logging
from typing import List, Mapping, Sequence

import numpy as np

from ..core.network import Network
from ..core.types import Evaluation, RunResult, Sample, Vector

logger = logging.getLogger(__name__)


class Trainer:
    """Present samples one at a time, backpropagating after each.

    Callbacks may implement ``on_step(step, metrics)`` and/or
    ``on_epoch(epoch, metrics)``; plain callables are invoked per epoch.
    """

    def __init__(self, network: Network, callbacks: Sequence[object] | None = None) -> None:
        self.network = network
        self.callbacks = list(callbacks or [])

    def run(
        self,
        samples: Sequence[Sample],
        epochs: int,
        *,
        shuffle: bool = True,
        seed: int = 0,
        report_every: int = 1,
        target_error: float | None = None,
    ) -> RunResult:
        if epochs < 1:
            raise ValueError(f"epochs must be at least 1, got {epochs}")
        if report_every < 1:
            raise ValueError(f"report_every must be at least 1, got {report_every}")
        if not samples:
            raise ValueError("cannot train on an empty sample list")

        network = self.network
        order = np.arange(len(samples))
        step = 0
        epoch = 0
        epoch_loss = 0.0
        for epoch in range(1, epochs + 1):
            if shuffle:
                order = np.random.default_rng(seed + epoch).permutation(len(samples))
            errors: List[float] = []
            for idx in order:
                sample = samples[int(idx)]
                network.feed_forward(sample.inputs)
                network.back_prop(sample.targets)
                errors.append(network.error)
                step += 1
                if step % report_every == 0:
                    self._emit_step(
                        step,
                        {
                            "error": network.error,
                            "recent_average_error": network.recent_average_error,
                        },
                    )
            epoch_loss = float(np.mean(errors))
            self._emit_epoch(
                epoch,
                {"loss": epoch_loss, "recent_average_error": network.recent_average_error},
            )
            logger.debug(
                "epoch=%d loss=%.6f recent_average_error=%.6f",
                epoch,
                epoch_loss,
                network.recent_average_error,
            )
            if target_error is not None and epoch_loss < target_error:
                logger.info("Reached target error %.6g after %d epochs", target_error, epoch)
                break

        return RunResult(
            steps=step,
            epochs=epoch,
            final_error=epoch_loss,
            recent_average_error=network.recent_average_error,
        )

    def evaluate(self, samples: Sequence[Sample]) -> Evaluation:
        """Mean RMS error over ``samples`` without touching any weight."""

        if not samples:
            raise ValueError("cannot evaluate an empty sample list")
        outputs: List[Vector] = []
        errors: List[float] = []
        for sample in samples:
            self.network.feed_forward(sample.inputs)
            outputs.append(self.network.get_results())
            errors.append(self.network.rms_error(sample.targets))
        return Evaluation(mean_error=float(np.mean(errors)), outputs=outputs)

    def predict(self, inputs: Sequence[float]) -> Vector:
        self.network.feed_forward(inputs)
        return self.network.get_results()

    # ------------------------------------------------------------------
    # Internal helpers

    def _emit_step(self, step: int, metrics: Mapping[str, float]) -> None:
        for callback in self.callbacks:
            if hasattr(callback, "on_step"):
                callback.on_step(step, metrics)  # type: ignore[attr-defined]

    def _emit_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        for callback in self.callbacks:
            if hasattr(callback, "on_epoch"):
                callback.on_epoch(epoch, metrics)  # type: ignore[attr-defined]
            elif callable(callback) and not hasattr(callback, "on_step"):
                callback(epoch, metrics)


__all__ = ["Trainer"]
