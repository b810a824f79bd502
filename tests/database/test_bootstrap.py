from timesheet_system.database.bootstrap import SCHEMA_PATH, iter_sql_statements, strip_create_db_and_use


def test_splitter_ignores_semicolons_inside_quotes():
    sql = "INSERT INTO t VALUES ('a;b');\nINSERT INTO t VALUES (\"c;d\");\nSELECT 1"

    assert list(iter_sql_statements(sql)) == [
        "INSERT INTO t VALUES ('a;b')",
        'INSERT INTO t VALUES ("c;d")',
        "SELECT 1",
    ]


def test_splitter_handles_escaped_quotes():
    sql = "INSERT INTO t VALUES ('it\\'s; fine');"

    assert list(iter_sql_statements(sql)) == ["INSERT INTO t VALUES ('it\\'s; fine')"]


def test_create_database_and_use_lines_are_removed():
    sql = "CREATE DATABASE timesheet_db;\nUSE timesheet_db;\nCREATE TABLE x (id INT);"

    assert list(iter_sql_statements(strip_create_db_and_use(sql))) == ["CREATE TABLE x (id INT)"]


def test_bundled_schema_defines_time_entries():
    statements = list(iter_sql_statements(strip_create_db_and_use(SCHEMA_PATH.read_text(encoding="utf-8"))))

    assert any("CREATE TABLE IF NOT EXISTS time_entries" in s for s in statements)
    assert all("CREATE DATABASE" not in s.upper() for s in statements)
