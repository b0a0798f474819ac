import pytest

from shared.text.cleaners import clean_node_query, clean_node_title


@pytest.mark.parametrize(
    "title, expected",
    [
        ("Docker Basics3h", "Docker Basics"),
        ("2. Networking 12,h4", "2. Networking"),
        ("10. Helm Charts", "10. Helm Charts"),
        ("Kubernetes", "Kubernetes"),
        ("", ""),
    ],
)
def test_clean_node_title(title, expected):
    assert clean_node_title(title) == expected


def test_clean_node_query_strips_roadmap_suffix():
    assert clean_node_query("Docker Basics roadmap5,h5,h") == "Docker Basics"
    assert clean_node_query("Docker Basics ROADMAP12") == "Docker Basics"


def test_clean_node_query_collapses_repeated_uppercase():
    assert clean_node_query("AAAPI Design") == "API Design"


def test_clean_node_query_removes_stray_numbers_only():
    assert clean_node_query("Git 2 2 Branching") == "Git Branching"
    assert clean_node_query("HTML5 Basics") == "HTML5 Basics"


def test_clean_node_query_removes_only_adjacent_duplicates():
    assert clean_node_query("Learn learn Python python basics Python") == "Learn Python basics Python"


def test_clean_node_query_empty():
    assert clean_node_query("") == ""
