import time

import pytest

from randbin_krr.config import RunConfig
from randbin_krr.helpers import ConfigError, Timer


def test_timer_measures_block():
    with Timer() as t:
        time.sleep(0.01)
    assert t.elapsed >= 0.005


def test_timer_single_use():
    t = Timer()
    with pytest.raises(RuntimeError):
        t.elapsed
    with t:
        pass
    with pytest.raises(RuntimeError):
        with t:
            pass


def test_valid_config():
    cfg = RunConfig(n_classes=3, d=4, r=10, lambdas=[0.0, 1.0], sigmas=[0.5])
    assert cfg.validate() is cfg


@pytest.mark.parametrize(
    "kwargs",
    [
        dict(n_classes=0),
        dict(d=0),
        dict(r=0),
        dict(lambdas=[]),
        dict(lambdas=[-1.0]),
        dict(sigmas=[]),
        dict(sigmas=[0.0]),
        dict(max_iter=0),
        dict(tol=0.0),
        dict(kernel="gaussian"),
        dict(n_threads=0),
        dict(device="tpu"),
    ],
)
def test_invalid_config(kwargs):
    base = dict(n_classes=3, d=4, r=10)
    base.update(kwargs)
    with pytest.raises(ConfigError):
        RunConfig(**base).validate()
