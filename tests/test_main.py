import pytest

from leafdb.main import main


def run(capsys, *args):
    exit_code = main(list(args))
    captured = capsys.readouterr()
    return exit_code, captured.out, captured.err


def test_dbinfo(capsys, apples_db):
    exit_code, out, _ = run(capsys, str(apples_db), ".dbinfo")

    assert exit_code == 0
    # two tables, an index and a view
    assert out == "database page size: 4096\nnumber of tables: 4\n"


def test_tables(capsys, apples_db):
    exit_code, out, _ = run(capsys, str(apples_db), ".tables")

    assert exit_code == 0
    assert out == "apples oranges\n"


def test_select_single_column(capsys, apples_db):
    _, out, _ = run(capsys, str(apples_db), "SELECT name FROM apples")

    assert out.splitlines() == ["Granny Smith", "Fuji", "Honeycrisp", "Golden Delicious"]


def test_select_multiple_columns_with_filter(capsys, apples_db):
    _, out, _ = run(
        capsys, str(apples_db), "SELECT color, name FROM apples WHERE id <= 2"
    )

    assert out.splitlines() == ["Red|Fuji", "Yellow|Golden Delicious"]


def test_select_count(capsys, apples_db):
    _, out, _ = run(capsys, str(apples_db), "SELECT COUNT(*) FROM oranges")

    assert out == "2\n"


def test_select_renders_nulls_and_blobs(capsys, measurements_db):
    _, out, _ = run(
        capsys, str(measurements_db), "SELECT label, payload FROM measurements WHERE label = 'c'"
    )

    assert out == "c|NULL\n"


@pytest.mark.parametrize(
    "command",
    [
        "SELECT name FROM pears",
        "SELECT taste FROM apples",
        ".schema",
        "UPDATE apples SET id = 1",
        "SELECT name FROM apples ORDER BY name",
        "SELECT name FROM apples LIMIT 1",
        "SELECT DISTINCT color FROM apples",
        "SELECT COUNT(color) FROM apples",
    ],
)
def test_errors_exit_with_status_one(capsys, apples_db, command):
    exit_code, out, err = run(capsys, str(apples_db), command)

    assert exit_code == 1
    assert out == ""
    assert err.startswith("error: ")


def test_missing_arguments(capsys):
    exit_code, _, err = run(capsys, "only-a-path.db")

    assert exit_code == 1
    assert "Usage" in err
