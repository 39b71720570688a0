from pathlib import Path

from src.hr_payroll.hr_payroll.database.bootstrap import _iter_sql_statements, _strip_create_db_and_use

DATABASE_DIR = Path(__file__).resolve().parents[2] / "database"


def test_splitter_keeps_semicolons_inside_quotes():
    sql = "INSERT INTO t VALUES ('a;b'); -- trailing; comment\nSELECT \"x;y\";"

    statements = list(_iter_sql_statements(sql))

    assert statements == ["INSERT INTO t VALUES ('a;b')", 'SELECT "x;y"']


def test_create_database_and_use_are_stripped():
    sql = "CREATE DATABASE IF NOT EXISTS payroll_db;\nUSE payroll_db;\nCREATE TABLE a (id INT);\n"

    statements = list(_iter_sql_statements(_strip_create_db_and_use(sql)))

    assert statements == ["CREATE TABLE a (id INT)"]


def test_schema_creates_every_table():
    sql = _strip_create_db_and_use((DATABASE_DIR / "schema.sql").read_text(encoding="utf-8"))

    created = [s for s in _iter_sql_statements(sql) if s.upper().startswith("CREATE TABLE")]
    text = "\n".join(created)

    for table in (
        "staff_members",
        "attendance_records",
        "salary_structures",
        "salary_advances",
        "statutory_rates",
        "tax_slabs",
        "payroll_periods",
        "payroll_records",
    ):
        assert table in text


def test_seed_is_plain_inserts():
    statements = list(_iter_sql_statements((DATABASE_DIR / "seed.sql").read_text(encoding="utf-8")))

    assert statements
    assert all(s.upper().startswith("INSERT INTO") for s in statements)
