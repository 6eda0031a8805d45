import pytest

from r53_backup.diffing import added_records, detect_changes, has_changed
from r53_backup.models import ChangePolicy, NOTIFICATION_HEADING
from r53_backup.zonefile import parse_zone

PREVIOUS = "a.example. 300 IN A 1.2.3.4"
CURRENT = "a.example. 300 IN A 1.2.3.4\nb.example. 300 IN A 5.6.7.8"


def test_structural_reports_added_records():
    report = detect_changes(PREVIOUS, CURRENT)
    assert report.policy is ChangePolicy.STRUCTURAL
    assert report.changed
    assert report.added == ["b.example. 300 IN A 5.6.7.8"]
    assert report.removed == []


@pytest.mark.parametrize("text", ["", PREVIOUS, CURRENT])
def test_identical_snapshots_are_unchanged(text):
    assert not detect_changes(text, text).changed


def test_formatting_differences_are_not_changes():
    reformatted = "; exported again\n\nb.example.   300 IN A 5.6.7.8 ; moved\n\na.example. IN 300 A 1.2.3.4\n"
    report = detect_changes(CURRENT, reformatted)
    assert not report.changed
    assert report.added == []


def test_empty_previous_counts_as_change_under_both_policies():
    for policy in ChangePolicy:
        assert detect_changes("", CURRENT, policy).changed


def test_removal_without_addition_is_a_change_with_no_added_records():
    report = detect_changes(CURRENT, PREVIOUS)
    assert report.changed
    assert report.added == []
    assert report.removed == ["b.example. 300 IN A 5.6.7.8"]


def test_ttl_change_is_reported_as_added_record():
    report = detect_changes(PREVIOUS, "a.example. 60 IN A 1.2.3.4")
    assert report.changed
    assert report.added == ["a.example. 60 IN A 1.2.3.4"]


def test_added_preserves_current_set_order():
    current = PREVIOUS + "\nc.example. 300 IN A 9.9.9.9\nb.example. 300 IN A 5.6.7.8"
    assert detect_changes(PREVIOUS, current).added == [
        "c.example. 300 IN A 9.9.9.9",
        "b.example. 300 IN A 5.6.7.8",
    ]


def test_same_length_different_records():
    previous = parse_zone("a.example. 300 IN A 1.2.3.4")
    current = parse_zone("a.example. 300 IN A 4.3.2.1")
    assert has_changed(previous, current)
    assert added_records(previous, current) == ["a.example. 300 IN A 4.3.2.1"]


def test_raw_text_policy_compares_bytes():
    assert not detect_changes(CURRENT, CURRENT, ChangePolicy.RAW_TEXT).changed
    report = detect_changes(CURRENT, CURRENT + "\n", ChangePolicy.RAW_TEXT)
    assert report.changed
    assert report.added == []
    assert detect_changes("", "", ChangePolicy.RAW_TEXT).changed


def test_notification_bodies():
    structural = detect_changes(PREVIOUS, CURRENT)
    assert structural.notification_body() == f"{NOTIFICATION_HEADING}\nb.example. 300 IN A 5.6.7.8"
    raw = detect_changes(PREVIOUS, CURRENT, ChangePolicy.RAW_TEXT)
    assert raw.notification_body() == f"{NOTIFICATION_HEADING}\n{CURRENT}"


def test_policy_from_text():
    assert ChangePolicy.from_text(None) is ChangePolicy.STRUCTURAL
    assert ChangePolicy.from_text("RAW") is ChangePolicy.RAW_TEXT
    assert ChangePolicy.from_text("structural") is ChangePolicy.STRUCTURAL
    with pytest.raises(ValueError):
        ChangePolicy.from_text("fuzzy")
