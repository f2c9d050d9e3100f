"""
Tests for perturbation policies and state snapshots.
"""

import pytest

from sgraph.models import ClockDomain, StateSnapshot
from sgraph.perturbation import PerturbationKind, PerturbationPolicy


class TestPerturbationPolicy:

    def test_single_bit_is_inverted_by_every_policy(self):
        for kind in PerturbationKind:
            policy = PerturbationPolicy(kind=kind, k=3)
            assert policy.perturb("1") == "0"
            assert policy.perturb("0") == "1"

    def test_flip_lsb(self):
        policy = PerturbationPolicy()
        assert policy.kind == PerturbationKind.FLIP_LSB
        assert policy.perturb("0101") == "0100"
        assert policy.perturb("1110") == "1111"

    def test_flip_all(self):
        policy = PerturbationPolicy(kind=PerturbationKind.FLIP_ALL)
        assert policy.perturb("0101") == "1010"

    def test_flip_random_k_flips_k_bits(self):
        policy = PerturbationPolicy(kind=PerturbationKind.FLIP_RANDOM_K, k=3, seed=7)
        value = "0" * 16
        perturbed = policy.perturb(value, "tb.cpu.pc")
        assert perturbed.count("1") == 3

    def test_flip_random_k_is_deterministic_per_signal(self):
        policy = PerturbationPolicy(kind=PerturbationKind.FLIP_RANDOM_K, k=2, seed=1)
        value = "0110100111010010"
        assert policy.perturb(value, "tb.a") == policy.perturb(value, "tb.a")
        again = PerturbationPolicy(kind=PerturbationKind.FLIP_RANDOM_K, k=2, seed=1)
        assert again.perturb(value, "tb.a") == policy.perturb(value, "tb.a")

    def test_k_larger_than_width_flips_everything(self):
        policy = PerturbationPolicy(kind=PerturbationKind.FLIP_RANDOM_K, k=10)
        assert policy.perturb("010", "tb.s") == "101"

    def test_unknown_bits_are_not_flipped(self):
        assert PerturbationPolicy().perturb("x") is None
        assert PerturbationPolicy().perturb("1z") is None
        assert PerturbationPolicy(kind=PerturbationKind.FLIP_ALL).perturb("1x") == "0x"

    def test_empty_value(self):
        assert PerturbationPolicy().perturb("") is None

    def test_invalid_k(self):
        with pytest.raises(ValueError):
            PerturbationPolicy(k=0)

    def test_from_dict(self):
        policy = PerturbationPolicy.from_dict({'kind': 'flip_random_k', 'k': 4, 'seed': 3})
        assert policy == PerturbationPolicy(PerturbationKind.FLIP_RANDOM_K, k=4, seed=3)
        assert policy.to_dict() == {'kind': 'flip_random_k', 'k': 4, 'seed': 3}
        assert PerturbationPolicy.from_dict({}) == PerturbationPolicy()

    def test_from_dict_unknown_kind(self):
        with pytest.raises(ValueError):
            PerturbationPolicy.from_dict({'kind': 'stuck_at_0'})


class TestStateSnapshot:

    def test_changed_against_follows_requested_order(self):
        before = StateSnapshot({"a": "0", "b": "1", "c": "01"})
        after = StateSnapshot({"a": "1", "b": "1", "c": "10"})
        assert after.changed_against(before, ["c", "b", "a"]) == ["c", "a"]

    def test_missing_signals_are_not_compared(self):
        before = StateSnapshot({"a": "0"})
        after = StateSnapshot({"a": "0", "b": "1"})
        assert after.changed_against(before, ["a", "b"]) == []

    def test_snapshot_is_read_only(self):
        snap = StateSnapshot({"a": "0"})
        with pytest.raises(TypeError):
            snap["a"] = "1"
        assert dict(snap) == {"a": "0"}
        assert len(snap) == 1


class TestClockDomain:

    def test_reset_levels(self):
        low = ClockDomain("tb.clk", 10.0, "tb.rst_n", reset_active=0)
        assert (low.reset_asserted, low.reset_released) == ("0", "1")
        high = ClockDomain("tb.clk", 10.0, "tb.rst")
        assert (high.reset_asserted, high.reset_released) == ("1", "0")

    @pytest.mark.parametrize("kwargs", [
        dict(clock="", period=10.0, reset="tb.rst"),
        dict(clock="tb.clk", period=0.0, reset="tb.rst"),
        dict(clock="tb.clk", period=10.0, reset="tb.clk"),
        dict(clock="tb.clk", period=10.0, reset="tb.rst", reset_active=2),
    ])
    def test_invalid_domain(self, kwargs):
        with pytest.raises(ValueError):
            ClockDomain(**kwargs)
