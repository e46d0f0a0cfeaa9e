"""
Artifact IO Tests
Tests for orchestrator/artifacts/io.py

1. Snapshot save/load keeps holders and the record layout
2. Distribution save/load keeps root, totals and claims
3. Malformed files raise SnapshotFormatException
"""
import json

import pytest

from core.schemas.distribution import Distribution
from core.schemas.errors import SnapshotFormatException
from orchestrator.artifacts.io import (
    dump_json,
    load_distribution,
    load_snapshot,
    save_distribution,
    save_snapshot,
)
from orchestrator.pipeline import build_distribution

from fixtures.common import make_network


@pytest.fixture
def distribution(allocation, commitment) -> Distribution:
    return build_distribution(allocation, commitment, network=make_network(), decimals=18)


class TestSnapshotIO:
    """Tests for save_snapshot()/load_snapshot()."""

    def test_round_trip(self, tmp_path, holders):
        path = save_snapshot(holders, tmp_path / "snap.json")
        assert load_snapshot(path) == holders

    def test_record_layout(self, tmp_path, scenario_holders):
        path = save_snapshot(scenario_holders, tmp_path / "snap.json", decimals=0)
        records = json.loads(path.read_text())

        assert records == [
            {"balance": "100", "isContract": False, "user": "0x" + "aa" * 20},
            {"balance": "300", "isContract": False, "user": "0x" + "bb" * 20},
        ]

    def test_creates_parent_dirs(self, tmp_path, holders):
        path = save_snapshot(holders, tmp_path / "a" / "b" / "snap.json")
        assert path.exists()
        assert not list(path.parent.glob("*.tmp"))

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_snapshot(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "snap.json"
        path.write_text("{not json")
        with pytest.raises(SnapshotFormatException, match="Invalid JSON"):
            load_snapshot(path)

    def test_not_a_list(self, tmp_path):
        path = tmp_path / "snap.json"
        path.write_text(json.dumps({"user": "0x" + "aa" * 20, "balance": "1"}))
        with pytest.raises(SnapshotFormatException, match="JSON list"):
            load_snapshot(path)

    def test_exclude_contracts_on_load(self, tmp_path):
        path = tmp_path / "snap.json"
        path.write_text(json.dumps([
            {"user": "0x" + "aa" * 20, "balance": "1", "isContract": True},
            {"user": "0x" + "bb" * 20, "balance": "1", "isContract": False},
        ]))
        assert len(load_snapshot(path, exclude_contracts=True)) == 1


class TestDistributionIO:
    """Tests for save_distribution()/load_distribution()."""

    def test_round_trip(self, tmp_path, distribution):
        path = save_distribution(distribution, tmp_path / "merkle.json")
        assert load_distribution(path) == distribution

    def test_camel_case_keys(self, tmp_path, distribution):
        path = save_distribution(distribution, tmp_path / "merkle.json")
        data = json.loads(path.read_text())

        assert {"merkleRoot", "tokenTotal", "requestedTotal", "remainder", "chainId", "claims"} <= set(data)
        claim = next(iter(data["claims"].values()))
        assert set(claim) == {"index", "amount", "amountFormatted", "proof"}
        assert isinstance(claim["amount"], str)

    def test_output_is_stable(self, tmp_path, distribution):
        first = save_distribution(distribution, tmp_path / "one.json").read_text()
        second = save_distribution(distribution, tmp_path / "two.json").read_text()
        assert first == second == dump_json(distribution)

    def test_totals_must_add_up(self, tmp_path, distribution):
        data = distribution.to_json_dict()
        data["remainder"] = str(int(data["remainder"]) + 1)
        path = tmp_path / "merkle.json"
        path.write_text(json.dumps(data))

        with pytest.raises(SnapshotFormatException, match="Invalid distribution"):
            load_distribution(path)

    def test_bad_root(self, tmp_path, distribution):
        data = distribution.to_json_dict()
        data["merkleRoot"] = "0x1234"
        path = tmp_path / "merkle.json"
        path.write_text(json.dumps(data))

        with pytest.raises(SnapshotFormatException):
            load_distribution(path)

    def test_claim_keys_lowercased(self, tmp_path, distribution):
        data = distribution.to_json_dict()
        data["claims"] = {k.upper().replace("0X", "0x"): v for k, v in data["claims"].items()}
        path = tmp_path / "merkle.json"
        path.write_text(json.dumps(data))

        assert load_distribution(path).claims.keys() == distribution.claims.keys()
