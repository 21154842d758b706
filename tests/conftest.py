import multiprocessing as mp

import numpy as np
import pytest

from mcoption import EngineConfig, EuropeanOptionEngine, SimulationParameters


@pytest.fixture(scope="session", autouse=True)
def _set_spawn_start_method():
    try:
        mp.set_start_method("spawn")
    except RuntimeError:
        pass  # already set


@pytest.fixture
def atm_call():
    """At-the-money call with the textbook inputs."""
    return SimulationParameters(S0=100.0, K=100.0, r=0.05, sigma=0.2, T=1.0, kind="call", n_trials=100_000)


@pytest.fixture
def otm_put():
    """Out-of-the-money put."""
    return SimulationParameters(S0=100.0, K=90.0, r=0.03, sigma=0.25, T=0.5, kind="put", n_trials=100_000)


@pytest.fixture
def seeded_engine():
    """Thread engine with a fixed root seed."""
    return EuropeanOptionEngine(EngineConfig(backend="thread", seed=1234))


@pytest.fixture
def rng():
    return np.random.default_rng(42)
