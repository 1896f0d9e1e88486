from __future__ import annotations

import json
from pathlib import Path
from typing import List, Mapping

import pytest

from momentumnet import Network, Sample, Trainer
from momentumnet.data import get_dataset
from momentumnet.reporting.metrics import MetricsCapture
from momentumnet.training import pipelines


class _StepCounter:
    def __init__(self) -> None:
        self.steps: List[int] = []

    def on_step(self, step: int, metrics: Mapping[str, float]) -> None:
        assert set(metrics) == {"error", "recent_average_error"}
        self.steps.append(step)


@pytest.mark.parametrize("name", ["and", "or"])
def test_linearly_separable_functions_are_learned(name) -> None:
    samples = get_dataset(name).samples
    network = Network([2, 2, 1], seed=3)
    capture = MetricsCapture()
    trainer = Trainer(network, callbacks=[capture])

    result = trainer.run(samples, epochs=1000, seed=3)

    assert result.epochs == 1000
    assert result.steps == 4000
    assert capture.history[-1][1]["loss"] < capture.history[0][1]["loss"]
    assert trainer.evaluate(samples).mean_error < 0.15


def test_xor_loss_improves() -> None:
    samples = get_dataset("xor").samples
    network = Network([2, 4, 1], seed=7)
    capture = MetricsCapture()
    Trainer(network, callbacks=[capture]).run(samples, epochs=1500, seed=7)
    first = capture.history[0][1]["loss"]
    last = capture.history[-1][1]["loss"]
    assert last < first


def test_callbacks_receive_steps_and_epochs() -> None:
    samples = get_dataset("or", repeat=2).samples
    counter = _StepCounter()
    epochs: List[int] = []
    trainer = Trainer(
        Network([2, 2, 1], seed=0),
        callbacks=[counter, lambda epoch, metrics: epochs.append(epoch)],
    )
    trainer.run(samples, epochs=3, seed=0)
    assert counter.steps == list(range(1, 25))
    assert epochs == [1, 2, 3]


def test_target_error_stops_early() -> None:
    samples = [Sample.of([1.0, 0.0], [1.0])]
    trainer = Trainer(Network([2, 2, 1], seed=0))
    result = trainer.run(samples, epochs=5000, shuffle=False, target_error=0.1)
    assert result.epochs < 5000
    assert result.final_error < 0.1
    assert result.steps == result.epochs


def test_evaluate_does_not_change_weights() -> None:
    network = Network([2, 3, 1], seed=1)
    trainer = Trainer(network)
    before = network.weights()
    evaluation = trainer.evaluate(get_dataset("xor").samples)
    assert network.weights() == before
    assert len(evaluation.outputs) == 4
    assert all(-1.0 < out[0] < 1.0 for out in evaluation.outputs)
    assert trainer.predict([0.0, 1.0]) == evaluation.outputs[1]


def test_run_rejects_bad_arguments() -> None:
    trainer = Trainer(Network([2, 1], seed=0))
    with pytest.raises(ValueError):
        trainer.run([], epochs=1)
    with pytest.raises(ValueError):
        trainer.run([Sample.of([0, 0], [0])], epochs=0)
    with pytest.raises(ValueError, match="report_every"):
        trainer.run([Sample.of([0, 0], [0])], epochs=1, report_every=0)


def test_report_every_thins_step_callbacks() -> None:
    counter = _StepCounter()
    epochs: List[int] = []
    trainer = Trainer(
        Network([2, 2, 1], seed=0),
        callbacks=[counter, lambda epoch, metrics: epochs.append(epoch)],
    )
    result = trainer.run([Sample.of([1, 0], [1])], epochs=4, report_every=2)
    assert counter.steps == [2, 4]
    assert epochs == [1, 2, 3, 4]
    assert result.steps == 4


def test_pipeline_writes_artifacts(tmp_path, capsys) -> None:
    config = pipelines.load_preset("single-pair")
    config["train"].update({"epochs": 200, "run_dir": str(tmp_path / "run"), "step_metrics": True})

    result = pipelines.run_pipeline(config)

    run_dir = tmp_path / "run"
    assert result.epochs == 200
    assert result.steps == 200
    assert Path(result.metrics_path) == run_dir / "metrics.jsonl"
    records = [json.loads(line) for line in (run_dir / "metrics.jsonl").read_text().splitlines()]
    assert len(records) == 200
    assert records[0]["epoch"] == 1 and records[0]["seed"] == 0
    assert len((run_dir / "steps.jsonl").read_text().splitlines()) == 200
    assert (run_dir / "metrics.csv").exists()
    summary = json.loads(Path(result.summary_path).read_text())
    assert summary["records"] == 200
    resolved = json.loads((run_dir / "config.json").read_text())
    assert resolved["model"]["topology"] == [2, 2, 1]
    assert resolved["dataset"]["type"] == "single_pair"
    assert set(resolved["final_metrics"]) == {"loss", "recent_average_error"}
    assert resolved["final_metrics"]["loss"] == pytest.approx(records[-1]["loss"])
    assert "=== momentumnet run ===" in capsys.readouterr().out


def test_pipeline_topology_from_hidden_and_checks(tmp_path) -> None:
    dataset = get_dataset("xor")
    assert pipelines.resolve_topology({"hidden": [3, 2]}, dataset) == [2, 3, 2, 1]
    assert pipelines.resolve_topology({}, dataset) == [2, 1]
    with pytest.raises(ValueError, match="does not fit"):
        pipelines.resolve_topology({"topology": [3, 2, 1]}, dataset)


def test_pipeline_rejects_incomplete_config() -> None:
    with pytest.raises(KeyError, match="train"):
        pipelines.run_pipeline({"data": {"name": "xor"}, "model": {}})


def test_presets_are_copies() -> None:
    preset = pipelines.load_preset("xor")
    preset["train"]["epochs"] = 1
    assert pipelines.load_preset("xor")["train"]["epochs"] == 2000
    assert set(pipelines.presets()) == {"xor", "and", "or", "single-pair"}
    with pytest.raises(KeyError):
        pipelines.load_preset("mnist")


def test_pipeline_report_every_limits_step_log(tmp_path, capsys) -> None:
    config = pipelines.load_preset("single-pair")
    config["train"].update(
        {"epochs": 10, "run_dir": str(tmp_path / "run"), "step_metrics": True, "report_every": 5}
    )
    pipelines.run_pipeline(config)
    steps = [json.loads(line) for line in (tmp_path / "run" / "steps.jsonl").read_text().splitlines()]
    assert [record["step"] for record in steps] == [5, 10]
