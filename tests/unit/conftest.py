import pytest


def make_record(name: str, percent, **extra) -> dict:
    record = {
        "repo_name": name,
        "scan": {
            "percent": percent,
            "links": [f"https://example.com/{name}"],
            "keys_found": [f"{name.upper()}_KEY|src/config.py"],
            "must_keys": [f"{name.upper()}_KEY"],
            "bad_keys": [],
        },
    }
    record.update(extra)
    return record


@pytest.fixture
def record_factory():
    return make_record


@pytest.fixture
def abc_records():
    """A(70), B(90), C(70) in insertion order."""
    return [make_record("A", 70), make_record("B", 90), make_record("C", 70)]
