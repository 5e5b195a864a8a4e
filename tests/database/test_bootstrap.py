from src.hr_attendance.hr_attendance.database.bootstrap import (
    SCHEMA_PATH,
    iter_sql_statements,
    strip_create_db_and_use,
)
from src.hr_attendance.hr_attendance.database.connection import DBConfig


def test_split_ignores_semicolons_in_quotes_and_comments():
    sql = """
    -- seed; not a statement
    INSERT INTO t VALUES ('a;b');
    INSERT INTO t VALUES ("it\\'s; fine");
    UPDATE t SET x = 1
    """

    statements = list(iter_sql_statements(sql))

    assert statements == [
        "INSERT INTO t VALUES ('a;b')",
        "INSERT INTO t VALUES (\"it\\'s; fine\")",
        "UPDATE t SET x = 1",
    ]


def test_strip_create_db_and_use():
    sql = "CREATE DATABASE IF NOT EXISTS x;\nUSE x;\nCREATE TABLE t (id INT);\n"

    assert strip_create_db_and_use(sql).strip() == "CREATE TABLE t (id INT);"


def test_schema_declares_every_table_once():
    sql = strip_create_db_and_use(SCHEMA_PATH.read_text(encoding="utf-8"))
    statements = list(iter_sql_statements(sql))

    tables = [s.split()[5] for s in statements]
    assert tables == [
        "employees",
        "work_schedules",
        "schedule_assignments",
        "schedule_overrides",
        "holidays",
        "attendance_records",
        "attendance_corrections",
    ]
    assert all(s.startswith("CREATE TABLE IF NOT EXISTS") for s in statements)

    attendance = statements[tables.index("attendance_records")]
    assert "UNIQUE KEY uq_attendance_employee_day (employee_id, work_date)" in attendance
    overrides = statements[tables.index("schedule_overrides")]
    assert "PRIMARY KEY (employee_id, override_date)" in overrides


def test_db_config_from_dict_defaults():
    config = DBConfig.from_dict({"host": "db", "port": "3307"})

    assert config.host == "db"
    assert config.port == 3307
    assert config.user == "root"
    assert config.database == "hr_attendance"
