from datetime import datetime, timedelta

import pytest

from guardian.ropa import COLUMNS, RopaRegister, parse_data_types


def make_register():
    register = RopaRegister()
    register.add("tenant-1", "Payroll", "HR", ["Name", "CPF"], "Employees", "Contract Performance", "5 Years")
    register.add("tenant-1", "Recruiting", "HR", ["Name", "CV"], "Candidates", "Consent", "2 Years")
    register.add("tenant-1", "Newsletter", "Marketing", ["E-mail"], "Leads", "Consent", "Until Revoked")
    return register


def test_parse_data_types():
    assert parse_data_types(" Name, CPF ,, ") == ["Name", "CPF"]
    assert parse_data_types("") == []


def test_add_requires_process_name():
    with pytest.raises(ValueError):
        RopaRegister().add("tenant-1", " ", "HR", [], "", "Consent", "")


def test_update_merges_fields_and_refreshes_timestamp():
    register = make_register()
    entry = register.entries[0]
    entry.updated_at = "2020-01-01T00:00:00"
    register.update(entry.id, retention_period="10 Years", data_types=["Name"])
    assert entry.retention_period == "10 Years"
    assert entry.data_types == ["Name"]
    assert entry.process_name == "Payroll"
    assert entry.updated_at > "2020-01-01T00:00:00"


def test_update_rejects_unknown_fields():
    register = make_register()
    with pytest.raises(ValueError):
        register.update(register.entries[0].id, owner="someone")


def test_delete_and_department_counts():
    register = make_register()
    assert register.department_counts() == {"HR": 2, "Marketing": 1}
    register.delete(register.entries[0].id)
    assert register.department_counts() == {"HR": 1, "Marketing": 1}


def test_updated_since():
    register = make_register()
    register.entries[0].updated_at = (datetime.now() - timedelta(days=30)).isoformat(timespec="seconds")
    recent = register.updated_since(days=7)
    assert [e.process_name for e in recent] == ["Recruiting", "Newsletter"]


def test_dataframe_and_files():
    register = make_register()
    df = register.to_dataframe()
    assert list(df.columns) == COLUMNS
    assert df.iloc[0]["Data Types"] == "Name, CPF"
    assert register.to_excel()[:2] == b"PK"
    assert register.to_pdf().startswith(b"%PDF")
