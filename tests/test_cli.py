import pytest

from rcgreedy_sim.cli import parse_args, main
from rcgreedy_sim.experiments import CSV_HEADER


def test_parse_args_reads_all_options():
    options = parse_args(["--trials", "3", "--option", "2", "--csv", "out.csv", "--graphs", "true"])
    assert options.trials == 3
    assert options.option == 2
    assert options.csv_output_file == "out.csv"
    assert options.generate_graphs is True


def test_parse_args_order_does_not_matter():
    first = parse_args(["--trials", "3", "--option", "2", "--csv", "a.csv", "--graphs", "0"])
    second = parse_args(["--graphs", "0", "--csv", "a.csv", "--option", "2", "--trials", "3"])
    assert first == second


@pytest.mark.parametrize(
    "word, expected",
    [("true", True), ("1", True), ("false", False), ("0", False), ("yes", False)],
)
def test_parse_args_graphs_flag(word, expected):
    options = parse_args(["--trials", "1", "--option", "1", "--csv", "f.csv", "--graphs", word])
    assert options.generate_graphs is expected


def test_parse_args_takes_leading_integer():
    options = parse_args(["--trials", "7x", "--option", "4", "--csv", "f.csv", "--graphs", "1"])
    assert options.trials == 7


@pytest.mark.parametrize(
    "argv",
    [
        ["--option", "1", "--csv", "f.csv", "--graphs", "1"],
        ["--trials", "1", "--csv", "f.csv", "--graphs", "1"],
        ["--trials", "1", "--option", "1", "--graphs", "1"],
        ["--trials", "1", "--option", "1", "--csv", "f.csv"],
        ["--trials", "abc", "--option", "1", "--csv", "f.csv", "--graphs", "1"],
        ["--trials", "1", "--option", "1", "--csv", "f.csv", "--graphs"],
    ],
)
def test_parse_args_missing_raises(argv):
    with pytest.raises(ValueError):
        parse_args(argv)


def test_main_without_arguments_prints_usage(capsys):
    assert main([]) == 1
    assert "Usage" in capsys.readouterr().err


def test_main_self_check_passes(capsys):
    assert main(["0"]) == 0
    out = capsys.readouterr().out
    assert "[PASS]" in out
    assert "[FAIL]" not in out


def test_main_non_numeric_mode_runs_self_check(capsys):
    assert main(["abc"]) == 0
    assert "[PASS]" in capsys.readouterr().out


def test_main_missing_parameters_fails(capsys, tmp_path):
    assert main(["1", "--trials", "1"]) == 1
    assert "Missing required parameters" in capsys.readouterr().err


def test_main_rejects_zero_trials(capsys, tmp_path):
    csv_path = tmp_path / "out.csv"
    code = main(["1", "--trials", "0", "--option", "1", "--csv", str(csv_path), "--graphs", "0"])
    assert code == 1
    assert "trials must be >= 1" in capsys.readouterr().err
    assert not csv_path.exists()


def test_main_unknown_option_writes_only_header(tmp_path):
    csv_path = tmp_path / "out.csv"
    code = main(["1", "--trials", "1", "--option", "99", "--csv", str(csv_path), "--graphs", "false"])
    assert code == 0
    assert csv_path.read_text(encoding="utf-8") == CSV_HEADER


def test_main_truncates_existing_file(tmp_path):
    csv_path = tmp_path / "out.csv"
    csv_path.write_text("old contents\n", encoding="utf-8")
    code = main(["2", "--trials", "1", "--option", "0", "--csv", str(csv_path), "--graphs", "1"])
    assert code == 0
    assert csv_path.read_text(encoding="utf-8") == CSV_HEADER