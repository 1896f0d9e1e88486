"""Command line entry point for momentumnet training runs."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Iterable

from momentumnet.core.errors import NetworkError
from momentumnet.data import available_datasets
from momentumnet.data.training_file import (
    generate_truth_table,
    read_training_file,
    write_training_file,
)
from momentumnet.data.truth_tables import FUNCTIONS
from momentumnet.training import pipelines

logger = logging.getLogger("momentumnet.cli")


def _format_result(result) -> str:
    payload = {
        "steps": result.steps,
        "epochs": result.epochs,
        "final_error": result.final_error,
        "recent_average_error": result.recent_average_error,
        "metrics": result.metrics_path,
        "summary": result.summary_path,
    }
    return json.dumps(payload, sort_keys=True)


def _error_message(exc: Exception) -> str:
    if isinstance(exc, KeyError) and exc.args:
        return str(exc.args[0])
    return str(exc)


def _topology(text: str) -> list[int]:
    try:
        return [int(part) for part in text.replace(",", " ").split()]
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid topology {text!r}") from exc


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--preset",
        choices=sorted(pipelines.presets().keys()),
        default="xor",
        help="Preset configuration to execute",
    )
    parser.add_argument("--config", type=Path, help="Optional JSON/YAML config override")
    parser.add_argument(
        "--data-file", type=Path, help="Train on a topology/in/out training data file"
    )
    parser.add_argument(
        "--topology", type=_topology, help="Layer sizes, e.g. '2 4 1' or '2,4,1'"
    )
    parser.add_argument("--epochs", type=int, help="Number of passes over the samples")
    parser.add_argument("--seed", type=int, help="Seed for weights and shuffling")
    parser.add_argument("--eta", type=float, help="Learning rate")
    parser.add_argument("--alpha", type=float, help="Momentum factor")
    parser.add_argument("--run-dir", type=Path, help="Directory for run artifacts")
    parser.add_argument(
        "--generate",
        type=int,
        metavar="N",
        help="Write N random rows of --function to --out and exit",
    )
    parser.add_argument(
        "--function", choices=sorted(FUNCTIONS), default="xor", help="Function for --generate"
    )
    parser.add_argument("--out", type=Path, help="Output path for --generate")
    parser.add_argument(
        "--list-presets", action="store_true", help="List available presets and exit"
    )
    parser.add_argument(
        "--list-datasets", action="store_true", help="List registered datasets and exit"
    )
    parser.add_argument(
        "--dump-config", type=Path, help="Dump the resolved config to a JSON file"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def _load_override(path: Path) -> dict:
    text = path.read_text()
    if path.suffix in {".yml", ".yaml"}:
        try:
            import yaml  # type: ignore
        except ImportError as exc:  # pragma: no cover - optional dependency
            raise RuntimeError("PyYAML is required to load YAML configs") from exc
        return yaml.safe_load(text) or {}
    return json.loads(text)


def _merge(base: dict, override: dict) -> dict:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            base[key] = _merge(dict(base[key]), value)
        else:
            base[key] = value
    return base


def build_config(args: argparse.Namespace) -> dict:
    config = json.loads(json.dumps(pipelines.load_preset(args.preset)))

    if args.config:
        config = _merge(config, _load_override(args.config))

    if args.data_file:
        config["data"] = {"name": "training_file", "options": {"path": str(args.data_file)}}
        declared, _ = read_training_file(args.data_file)
        config["model"].pop("topology", None)
        # A file without a topology line keeps the preset's hidden layers.
        if declared is not None:
            config["model"].pop("hidden", None)

    model = config.setdefault("model", {})
    train = config.setdefault("train", {})
    if args.topology:
        model["topology"] = list(args.topology)
        model.pop("hidden", None)
    if args.eta is not None:
        model["eta"] = args.eta
    if args.alpha is not None:
        model["alpha"] = args.alpha
    if args.epochs is not None:
        train["epochs"] = args.epochs
    if args.seed is not None:
        train["seed"] = args.seed
    if args.run_dir is not None:
        train["run_dir"] = str(args.run_dir)
    return config


def main(argv: Iterable[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.list_presets:
        for name in sorted(pipelines.presets().keys()):
            print(name)
        raise SystemExit(0)

    if args.list_datasets:
        for name in available_datasets():
            print(name)
        raise SystemExit(0)

    if args.generate is not None:
        if args.out is None:
            raise SystemExit("--generate requires --out")
        topology = args.topology or [2, 4, 1]
        try:
            samples = generate_truth_table(
                args.function, args.generate, seed=args.seed or 0, topology=topology
            )
        except (NetworkError, ValueError) as exc:
            raise SystemExit(str(exc)) from None
        write_training_file(args.out, samples, topology)
        print(json.dumps({"samples": len(samples), "path": str(args.out)}))
        raise SystemExit(0)

    try:
        config = build_config(args)
        if args.dump_config:
            args.dump_config.parent.mkdir(parents=True, exist_ok=True)
            args.dump_config.write_text(json.dumps(config, indent=2))
        result = pipelines.run_pipeline(config)
    except (NetworkError, KeyError, ValueError) as exc:
        message = _error_message(exc)
        logger.error("Run failed: %s", message)
        raise SystemExit(message) from None

    print(_format_result(result))


if __name__ == "__main__":
    main()
