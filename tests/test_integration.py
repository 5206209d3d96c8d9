"""End-to-end runs through the pipeline, the parameter stack and the runner script."""

from __future__ import annotations

import json
import runpy
from pathlib import Path

import pytest

from hexasphere import parameters, pipeline
from hexasphere.errors import InvalidArgument
from hexasphere.parameters import HexasphereParameters
from hexasphere.pipeline import LifePipeline, PipelineContext, default_steps

REPO_ROOT = Path(__file__).resolve().parents[1]


class TestPipelineIntegration:
    def test_full_pipeline(self):
        params = HexasphereParameters(num_divisions=2, generations=3, seed=1)
        ctx = LifePipeline().run(PipelineContext(params=params))
        assert len(ctx.topology) == 42
        assert ctx.validation["asymmetric_pairs"] == []
        assert ctx.state.generation == 3
        assert len(ctx.history) == 4
        assert ctx.history[0] == round(42 * params.seed_fraction)
        assert ctx.history[-1] == len(ctx.state.live)

    def test_pipeline_is_reproducible_with_seed(self):
        params = HexasphereParameters(num_divisions=3, generations=4, seed=99)
        first = LifePipeline().run(PipelineContext(params=params))
        second = LifePipeline().run(PipelineContext(params=params))
        assert first.history == second.history
        assert first.state.live == second.state.live

    def test_caller_supplied_seed(self):
        params = HexasphereParameters(num_divisions=1, generations=1)
        ctx = PipelineContext(params=params, initial_live=frozenset({0}))
        LifePipeline().run(ctx)
        assert ctx.history == [1, 0]

    def test_step_ordering(self):
        names = [s.name for s in default_steps()]
        assert names == ["topology", "seed", "simulation"]

    def test_remove_and_replace_steps(self):
        class MarkerStep(pipeline.PipelineStep):
            name = "simulation"

            def execute(self, ctx):
                ctx.history.append(-1)

        params = HexasphereParameters(num_divisions=1, generations=2, seed=0)
        p = LifePipeline()
        p.replace("simulation", MarkerStep())
        ctx = p.run(PipelineContext(params=params))
        assert ctx.history[-1] == -1

        p.remove("simulation")
        ctx = p.run(PipelineContext(params=params))
        assert ctx.state.generation == 0

    def test_existing_topology_is_reused(self, small_topology):
        params = HexasphereParameters(num_divisions=2, generations=0, seed=4)
        ctx = PipelineContext(params=params, topology=small_topology)
        LifePipeline().run(ctx)
        assert ctx.topology is small_topology
        assert ctx.validation == {}
        assert ctx.state.generation == 0

    def test_status_callback_is_forwarded(self):
        messages = []
        params = HexasphereParameters(num_divisions=1, generations=0)
        LifePipeline().run(PipelineContext(params=params, status=messages.append))
        assert "Calculating neighborhoods for all 12 tiles" in messages

    def test_random_seed(self):
        chosen = pipeline.random_seed(100, 0.25, seed=3)
        assert len(chosen) == 25
        assert all(0 <= i < 100 for i in chosen)
        assert pipeline.random_seed(100, 0.25, seed=3) == chosen
        assert pipeline.random_seed(10, 0.0) == frozenset()


class TestParameters:
    def test_defaults_are_valid(self):
        params = HexasphereParameters()
        params.validate()
        assert params.tile_count() == 642

    def test_flat_json(self, tmp_path):
        config_path = tmp_path / "flat.json"
        config_path.write_text(json.dumps({"radius": 4.0, "num_divisions": 3}))
        params = HexasphereParameters.from_dict(parameters.load_json_config(config_path))
        assert params.radius == 4.0
        assert params.num_divisions == 3

    def test_nested_json(self, tmp_path):
        config = {
            "geometry": {"radius": 5.0, "hex_size": 0.9},
            "simulation": {"generations": 7, "seed": 12},
        }
        config_path = tmp_path / "nested.json"
        config_path.write_text(json.dumps(config))
        params = parameters.load_parameters(config_path)
        assert params.radius == 5.0
        assert params.hex_size == 0.9
        assert params.generations == 7
        assert params.seed == 12

    def test_cli_overrides_win(self, tmp_path):
        config_path = tmp_path / "nested.json"
        config_path.write_text(json.dumps({"geometry": {"radius": 5.0}}))
        params = parameters.load_parameters(config_path, cli_overrides={"radius": 6.0})
        assert params.radius == 6.0

    def test_parse_cli_overrides(self):
        overrides, parsed = parameters.parse_cli_overrides(
            ["--divisions", "3", "--hex-size", "0.9", "--workers", "2", "--bogus"]
        )
        assert overrides == {"num_divisions": 3, "hex_size": 0.9, "max_workers": 2}
        assert parsed.config is None

    def test_unknown_keys(self):
        with pytest.raises(InvalidArgument):
            HexasphereParameters.from_dict({"frequency": 3})
        with pytest.raises(KeyError):
            parameters.apply_overrides(HexasphereParameters(), {"frequency": 3})

    @pytest.mark.parametrize(
        "field, value",
        [
            ("radius", 0.0),
            ("num_divisions", 0),
            ("num_divisions", 2.5),
            ("hex_size", 1.5),
            ("hex_size", 0.0),
            ("generations", -1),
            ("seed_fraction", 1.2),
            ("segments", 0),
            ("max_workers", 0),
            ("radius", float("nan")),
            ("radius", float("inf")),
            ("radius", "big"),
            ("hex_size", "large"),
            ("generations", 2.5),
            ("seed_fraction", "most"),
            ("seed", 1.5),
            ("segments", 643),
            ("max_workers", 1.5),
        ],
    )
    def test_invalid_values(self, field, value):
        with pytest.raises(InvalidArgument):
            HexasphereParameters.from_dict({field: value})

    def test_config_file_errors(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            parameters.load_json_config(tmp_path / "missing.json")
        bad = tmp_path / "list.json"
        bad.write_text("[1, 2, 3]")
        with pytest.raises(InvalidArgument):
            parameters.load_json_config(bad)
        assert parameters.load_json_config(None) == {}

    def test_roundtrip(self):
        params = HexasphereParameters(radius=2.0, num_divisions=5, segments=4, seed=8)
        assert HexasphereParameters.from_dict(params.to_dict()) == params


class TestRunner:
    @pytest.fixture()
    def run_life(self):
        return runpy.run_path(str(REPO_ROOT / "scripts" / "run_life.py"))["main"]

    def test_run_prints_summary(self, run_life, capsys):
        code = run_life(["--divisions", "1", "--generations", "2", "--seed", "0", "--"])
        assert code == 0
        summary = json.loads(capsys.readouterr().out)
        assert summary["tiles"] == 12
        assert summary["generation"] == 2
        assert len(summary["history"]) == 3

    def test_run_rejects_bad_configuration(self, run_life, capsys):
        assert run_life(["--divisions", "1", "--hex-size", "2.0"]) == 2
        assert capsys.readouterr().out == ""

    @pytest.mark.parametrize(
        "argv",
        [
            ["--divisions", "1", "--radius", "nan"],
            ["--divisions", "1", "--segments", "13"],
            ["--divisions", "0"],
        ],
    )
    def test_run_rejects_bad_cli_values(self, run_life, capsys, argv):
        assert run_life(argv) == 2
        assert capsys.readouterr().out == ""

    @pytest.mark.parametrize(
        "config",
        [
            {"radius": "big"},
            {"simulation": {"generations": 2.5}},
            {"geometry": {"num_divisions": True}},
        ],
    )
    def test_run_rejects_bad_config_file(self, run_life, capsys, tmp_path, config):
        config_path = tmp_path / "bad.json"
        config_path.write_text(json.dumps(config))
        assert run_life(["--config", str(config_path)]) == 2
        assert capsys.readouterr().out == ""

    def test_run_rejects_malformed_json(self, run_life, capsys, tmp_path):
        config_path = tmp_path / "broken.json"
        config_path.write_text("{radius: 1")
        assert run_life(["--config", str(config_path)]) == 2
        assert capsys.readouterr().out == ""
