from app.core.database import _resolve_database_url, check_database


def test_sqlite_parent_directory_is_created(tmp_path):
    """A fresh deploy has no data directory yet; resolving the URL must create it."""
    db_path = tmp_path / "nested" / "data" / "testmanager.db"
    url = f"sqlite:///{db_path.as_posix()}"

    assert _resolve_database_url(url) == url
    assert db_path.parent.exists()
    assert not (db_path.parent / ".writable_test").exists()


def test_non_file_urls_are_left_alone():
    assert _resolve_database_url("sqlite:///:memory:") == "sqlite:///:memory:"
    assert _resolve_database_url("postgresql://qa:secret@db/tests") == "postgresql://qa:secret@db/tests"


def test_check_database_answers():
    assert check_database() is True
