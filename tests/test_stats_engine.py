import itertools
import math

import numpy as np
import pytest

from mcoption import AggregationError, PartialStatistics, aggregate, combine
from mcoption.stats_engine import payoff_variance
from mcoption.utils import z_crit


class TestCombine:
    """Test reduction of worker summaries"""

    def test_totals(self):
        total = combine([PartialStatistics(1.0, 1.0, 1), PartialStatistics(2.0, 4.0, 1)])
        assert total == PartialStatistics(3.0, 5.0, 2)

    def test_empty_sequence(self):
        assert combine([]) == PartialStatistics.empty()

    def test_permutation_bit_identical(self):
        """Test any order of summaries gives the same totals bit for bit"""
        partials = [
            PartialStatistics(0.1, 1e-17, 3),
            PartialStatistics(1e16, 0.3, 5),
            PartialStatistics(-1e16 + 7.7, 1e20, 7),
            PartialStatistics(3.3333333333333335, 2.0 / 3.0, 11),
        ]
        reference = combine(partials)
        for perm in itertools.permutations(partials):
            assert combine(perm) == reference


class TestAggregate:
    """Test price and confidence interval formulas"""

    def test_formulas(self):
        """Test mean, variance, standard error, discounting and 1.96 margin"""
        payoffs = np.array([0.0, 2.0, 4.0, 6.0])
        p = PartialStatistics.from_payoffs(payoffs)
        res = aggregate([p], r=0.05, T=2.0)

        mean = 3.0
        variance = np.mean(payoffs**2) - mean**2  # population convention
        se = math.sqrt(variance / 4)
        disc = math.exp(-0.1)
        assert res.option_price == pytest.approx(mean * disc)
        assert res.variance == pytest.approx(variance)
        assert res.std_error == pytest.approx(se)
        assert res.lower == pytest.approx(mean * disc - 1.96 * se * disc)
        assert res.upper == pytest.approx(mean * disc + 1.96 * se * disc)
        assert res.n_trials == 4
        assert res.workers_used == 1

    def test_permutation_gives_identical_result(self):
        """Test aggregation is order-independent"""
        rng = np.random.default_rng(0)
        partials = [PartialStatistics.from_payoffs(rng.exponential(5.0, 1000)) for _ in range(5)]
        reference = aggregate(partials, r=0.03, T=1.5)
        for perm in itertools.permutations(partials):
            assert aggregate(list(perm), r=0.03, T=1.5) == reference

    def test_one_vs_eight_workers_identical(self):
        """Test the same payoffs split over 1 or 8 summaries aggregate identically"""
        payoffs = np.arange(8000, dtype=float) % 37  # integer-valued, so every sum is exact
        single = [PartialStatistics.from_payoffs(payoffs)]
        eight = [PartialStatistics.from_payoffs(chunk) for chunk in np.array_split(payoffs, 8)]
        a = aggregate(single, r=0.05, T=1.0, workers_used=1)
        b = aggregate(eight, r=0.05, T=1.0, workers_used=1)
        assert a == b

    def test_negative_variance_clamped(self):
        """Test E[X^2]-E[X]^2 cancellation never reports a negative variance"""
        p = PartialStatistics.from_payoffs(np.full(3, 0.1))
        res = aggregate([p], r=0.0, T=1.0)
        assert res.variance >= 0.0
        assert res.std_error >= 0.0
        assert res.lower <= res.option_price <= res.upper

    def test_forced_negative_variance(self):
        """Test a summary whose identity goes negative is clamped to zero"""
        total = PartialStatistics(sum=10.0, sum_squares=9.999, count=10)
        assert payoff_variance(total) == 0.0

    def test_zero_count_raises(self):
        """Test zero total trials is an arithmetic defect"""
        with pytest.raises(AggregationError):
            aggregate([PartialStatistics.empty()], r=0.05, T=1.0)
        with pytest.raises(ArithmeticError):
            aggregate([], r=0.05, T=1.0)

    def test_non_finite_propagates(self, caplog):
        """Test infinite payoff sums are not dropped"""
        partials = [PartialStatistics(math.inf, math.inf, 10), PartialStatistics(5.0, 30.0, 10)]
        with caplog.at_level("WARNING", logger="mcoption.stats_engine"):
            res = aggregate(partials, r=0.0, T=1.0)
        assert math.isinf(res.option_price)
        assert not res.is_finite
        assert "Non-finite" in caplog.text

    def test_discount_overflow_gives_infinite_price(self, caplog):
        """Test a large negative rate returns an infinite price instead of raising"""
        with caplog.at_level("WARNING", logger="mcoption.stats_engine"):
            res = aggregate([PartialStatistics(1.0, 1.0, 1)], r=-1000.0, T=1.0)
        assert res.option_price == math.inf
        assert not res.is_finite
        assert "Non-finite" in caplog.text

    def test_other_confidence_level(self):
        p = PartialStatistics.from_payoffs(np.array([1.0, 3.0, 5.0, 7.0]))
        r95 = aggregate([p], r=0.0, T=1.0, confidence=0.95)
        r99 = aggregate([p], r=0.0, T=1.0, confidence=0.99)
        assert r99.width > r95.width
        assert r99.confidence == 0.99


class TestZCrit:
    """Test critical values"""

    def test_tabulated(self):
        assert z_crit(0.95) == 1.96
        assert z_crit(0.99) == 2.576

    def test_scipy_fallback(self):
        assert z_crit(0.8) == pytest.approx(1.2815515655446004)

    @pytest.mark.parametrize("bad", [0.0, 1.0, -0.1])
    def test_invalid(self, bad):
        with pytest.raises(ValueError):
            z_crit(bad)
