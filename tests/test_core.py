import math

import numpy as np
import pytest

from mcoption import (
    EngineConfig,
    OptionKind,
    PartialStatistics,
    PricingResult,
    SimulationParameters,
    TrialRange,
    ValidationError,
)


class TestSimulationParameters:
    """Test parameter validation and construction"""

    def test_valid_parameters_pass(self, atm_call):
        """Test a well-formed parameter set validates"""
        atm_call.validate()
        assert atm_call.is_call

    def test_put_kind(self, otm_put):
        """Test put detection"""
        assert not otm_put.is_call
        assert OptionKind(otm_put.kind) is OptionKind.put

    @pytest.mark.parametrize(
        ("field", "value", "message"),
        [
            ("S0", 0.0, "S0"),
            ("S0", -1.0, "S0"),
            ("K", 0.0, "K"),
            ("sigma", 0.0, "sigma"),
            ("T", -0.5, "T"),
            ("S0", float("nan"), "S0"),
            ("sigma", float("inf"), "sigma"),
            ("r", float("nan"), "r"),
            ("n_trials", 0, "n_trials"),
            ("n_trials", -5, "n_trials"),
            ("n_trials", 10.5, "n_trials"),
            ("n_workers", -1, "n_workers"),
            ("kind", "straddle", "kind"),
        ],
    )
    def test_invalid_fields(self, atm_call, field, value, message):
        """Test each invalid field raises ValidationError"""
        from dataclasses import replace

        params = replace(atm_call, **{field: value})
        with pytest.raises(ValidationError, match=message):
            params.validate()

    def test_negative_rate_allowed(self, atm_call):
        """Test r may be any finite real"""
        from dataclasses import replace

        replace(atm_call, r=-0.02).validate()

    def test_validation_error_is_value_error(self):
        """Test ValidationError can be caught as ValueError"""
        assert issubclass(ValidationError, ValueError)

    def test_from_mapping(self):
        """Test building from the external record"""
        params = SimulationParameters.from_mapping(
            {"S0": 100, "K": 110, "r": 0.05, "sigma": 0.2, "T": 1, "isCall": False, "numTrials": 5000, "threads": 3}
        )
        assert params.kind is OptionKind.put
        assert params.n_trials == 5000
        assert params.n_workers == 3

    @pytest.mark.parametrize("is_call", ["false", "true", 1, 0, None])
    def test_from_mapping_rejects_non_boolean_is_call(self, is_call):
        """Test isCall must be a JSON boolean"""
        with pytest.raises(ValidationError, match="isCall"):
            SimulationParameters.from_mapping(
                {"S0": 100, "K": 100, "r": 0.05, "sigma": 0.2, "T": 1, "isCall": is_call, "numTrials": 10}
            )

    def test_from_mapping_integral_float_counts(self):
        """Test whole-number floats such as 1e6 are accepted as counts"""
        params = SimulationParameters.from_mapping(
            {"S0": 100, "K": 100, "r": 0.05, "sigma": 0.2, "T": 1, "isCall": True, "numTrials": 1e6,
             "workerCount": 4.0}
        )
        params.validate()
        assert params.n_trials == 1_000_000
        assert isinstance(params.n_trials, int)
        assert params.n_workers == 4

    def test_from_mapping_fractional_trials_rejected(self):
        """Test a fractional trial count still fails validation"""
        params = SimulationParameters.from_mapping(
            {"S0": 100, "K": 100, "r": 0.05, "sigma": 0.2, "T": 1, "isCall": True, "numTrials": 10.5}
        )
        with pytest.raises(ValidationError, match="n_trials"):
            params.validate()

    def test_from_mapping_missing_key(self):
        """Test missing keys are reported"""
        with pytest.raises(ValidationError, match="Missing required parameters: sigma"):
            SimulationParameters.from_mapping(
                {"S0": 100, "K": 110, "r": 0.05, "T": 1, "isCall": True, "numTrials": 10}
            )


class TestTrialRange:
    """Test TrialRange"""

    def test_length(self):
        assert len(TrialRange(3, 10)) == 7


class TestPartialStatistics:
    """Test the partial-statistics monoid"""

    def test_empty_is_identity(self):
        """Test merging with empty leaves a summary unchanged"""
        p = PartialStatistics(3.0, 5.0, 2)
        assert p + PartialStatistics.empty() == p
        assert PartialStatistics.empty().merge(p) == p

    def test_merge_adds_components(self):
        """Test merge is component-wise addition"""
        merged = PartialStatistics(1.0, 2.0, 3) + PartialStatistics(4.0, 5.0, 6)
        assert merged == PartialStatistics(5.0, 7.0, 9)

    def test_from_payoffs(self):
        """Test summarizing an explicit sample"""
        p = PartialStatistics.from_payoffs(np.array([0.0, 1.0, 2.0, 3.0]))
        assert p.sum == 6.0
        assert p.sum_squares == 14.0
        assert p.count == 4

    def test_frozen(self):
        """Test published summaries are immutable"""
        p = PartialStatistics(1.0, 1.0, 1)
        with pytest.raises(AttributeError):
            p.sum = 2.0  # type: ignore[misc]


class TestPricingResult:
    """Test PricingResult helpers"""

    def test_width_and_contains(self):
        res = PricingResult(option_price=10.0, lower=9.5, upper=10.5, workers_used=4)
        assert res.width == pytest.approx(1.0)
        assert res.contains(10.2)
        assert not res.contains(11.0)

    def test_is_finite(self):
        assert PricingResult(1.0, 0.5, 1.5, 1).is_finite
        assert not PricingResult(math.inf, math.nan, math.nan, 1).is_finite

    def test_to_dict_shape(self):
        """Test the external output record"""
        out = PricingResult(option_price=10.0, lower=9.5, upper=10.5, workers_used=4).to_dict()
        assert out == {"optionPrice": 10.0, "confidence": {"lower": 9.5, "upper": 10.5}, "workersUsed": 4}


class TestEngineConfig:
    """Test EngineConfig validation"""

    @pytest.mark.parametrize(
        ("kwargs", "message"),
        [
            ({"backend": "gpu"}, "backend"),
            ({"batch_size": 0}, "batch_size"),
            ({"confidence": 1.0}, "confidence"),
            ({"fallback_workers": 0}, "fallback_workers"),
            ({"seed": -1}, "seed"),
        ],
    )
    def test_invalid_config(self, kwargs, message):
        with pytest.raises(ValidationError, match=message):
            EngineConfig(**kwargs)

    def test_with_overrides(self):
        cfg = EngineConfig()
        cfg2 = cfg.with_overrides(seed=7, backend="sequential")
        assert cfg2.seed == 7
        assert cfg2.backend == "sequential"
        assert cfg.seed is None
