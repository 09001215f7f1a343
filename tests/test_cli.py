import numpy as np
import pandas as pd
import pytest
from sklearn.datasets import dump_svmlight_file

from randbin_krr.__main__ import main, parse_params
from randbin_krr.helpers import ConfigError


@pytest.fixture
def libsvm_files(tmp_path, multiclass_data):
    X_train, y_train, X_test, y_test = multiclass_data
    # Shift into the positive quadrant so every attribute is present.
    train = tmp_path / "train.txt"
    test = tmp_path / "test.txt"
    dump_svmlight_file(X_train + 5.0, y_train.astype(int), str(train), zero_based=False)
    dump_svmlight_file(X_test + 5.0, y_test.astype(int), str(test), zero_based=False)
    return str(train), str(test)


def argv(train, test, *, threads="2", classes="3", r="40", lambdas=("1e-2",), sigmas=("1.0", "2.0")):
    return [
        threads, train, test, classes, "2", r,
        str(len(lambdas)), *lambdas,
        str(len(sigmas)), *sigmas,
        "200", "1e-6", "1",
    ]


def test_parse_params():
    train, test, kwargs = parse_params(
        ["4", "a.txt", "b.txt", "3", "10", "100", "2", "0.1", "1", "1", "0.5", "50", "1e-3", "0"]
    )
    assert (train, test) == ("a.txt", "b.txt")
    assert kwargs == dict(
        n_classes=3, d=10, r=100, lambdas=[0.1, 1.0], sigmas=[0.5],
        max_iter=50, tol=1e-3, n_threads=4, verbose=False,
    )


@pytest.mark.parametrize(
    "tokens",
    [
        ["4", "a.txt", "b.txt", "3", "10"],
        ["4", "a.txt", "b.txt", "3", "10", "100", "2", "0.1", "1", "1", "0.5", "50", "1e-3", "0", "extra"],
        ["four", "a.txt", "b.txt", "3", "10", "100", "1", "0.1", "1", "0.5", "50", "1e-3", "0"],
    ],
)
def test_parse_params_errors(tokens):
    with pytest.raises(ConfigError):
        parse_params(tokens)


def test_main_runs_sweep(libsvm_files, tmp_path, capsys):
    train, test = libsvm_files
    csv = tmp_path / "results.csv"
    code = main(argv(train, test) + ["--seed", "3", "--results-csv", str(csv)])

    assert code == 0
    out = capsys.readouterr().out
    assert "RandBinning: time loading data" in out
    assert "n train = 240, m test = 60, num threads = 2" in out
    assert out.count("RandBinning: OneVsAll. r = 40") == 2
    assert out.count("RandBinning: Train. PCG: iteration =") == 6

    df = pd.read_csv(csv)
    assert list(df["sigma"]) == [1.0, 2.0]
    assert (df["perf"] >= 90.0).all()


def test_main_negative_seed(libsvm_files):
    train, test = libsvm_files
    assert main(argv(train, test, sigmas=("1.0",)) + ["--seed", "-1"]) == 0


def test_main_missing_file(tmp_path, capsys):
    missing = str(tmp_path / "missing.txt")
    assert main(argv(missing, missing)) == -1
    assert "not found" in capsys.readouterr().err


def test_main_labels_outside_classes(libsvm_files, tmp_path, capsys):
    train, _ = libsvm_files
    test = tmp_path / "bad.txt"
    test.write_text("5 1:1.0 2:1.0\n0 1:2.0 2:0.5\n")
    assert main(argv(train, str(test))) == -1
    assert "labels" in capsys.readouterr().err


@pytest.mark.parametrize(
    "kwargs",
    [dict(r="0"), dict(sigmas=("-1.0",)), dict(threads="0"), dict(lambdas=("-0.5",))],
)
def test_main_config_errors(libsvm_files, kwargs, capsys):
    train, test = libsvm_files
    assert main(argv(train, test, **kwargs)) == 2
    assert "error" in capsys.readouterr().err


def test_main_kernel_choice(libsvm_files):
    train, test = libsvm_files
    assert main(argv(train, test, sigmas=("3.0",)) + ["--kernel", "triangular"]) == 0
    with pytest.raises(SystemExit):
        main(argv(train, test) + ["--kernel", "gaussian"])
