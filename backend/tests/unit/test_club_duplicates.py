import pytest
from bson import ObjectId

from freetalk.domain.clubs.duplicates import detect, summarize
from freetalk.domain.clubs.models import Club, Membership, UserRef


def member(user_id=None, name=None):
    if user_id is None and name is None:
        return Membership(user=None)
    return Membership(user=UserRef(id=user_id, name=name))


def club(name, *members, club_id="c1"):
    return Club(id=club_id, name=name, members=list(members))


def test_clean_club_has_no_finding():
    chess = club("Chess", member("u1", "Ann"), member("u2", "Bob"))
    assert detect(chess) is None


def test_empty_member_list_has_no_finding():
    assert detect(club("Empty")) is None


def test_all_null_users_have_no_finding():
    assert detect(club("Ghosts", member(), member(), member())) is None


def test_single_duplicate():
    art = club("Art", member("u1", "Ann"), member("u1", "Ann"), member("u2", "Bob"), club_id="art-1")
    finding = detect(art)

    assert finding is not None
    assert finding.club_id == "art-1"
    assert finding.club_name == "Art"
    assert finding.total_members == 3
    assert finding.unique_members == 2
    assert list(finding.duplicates) == ["u1"]
    assert finding.duplicates["u1"].count == 2
    assert finding.duplicates["u1"].display_name == "Ann"


def test_user_listed_three_times_is_one_entry():
    a = club("A", member("u1", "Ann"), member("u2", "Bob"), member("u1", "Ann"), member("u1", "Ann"))
    finding = detect(a)

    assert finding.total_members == 4
    assert finding.unique_members == 2
    assert set(finding.duplicates) == {"u1"}
    assert finding.duplicates["u1"].count == 3


def test_null_users_are_skipped_and_name_falls_back_to_id():
    c = club("Nulls", member(), member("u1"), member("u1"))
    finding = detect(c)

    assert finding.total_members == 2
    assert finding.unique_members == 1
    assert finding.duplicates["u1"].count == 2
    assert finding.duplicates["u1"].display_name == "u1"


def test_user_without_id_is_skipped():
    c = club("NoIds", Membership(user=UserRef(id=None, name="Nobody")), member("u1", "Ann"), member("u1", "Ann"))
    finding = detect(c)

    assert finding.total_members == 2
    assert "None" not in finding.duplicates
    assert c.skipped_memberships == 1


def test_display_name_comes_from_first_matching_membership():
    c = club("Renamed", member("u1"), member("u1", "Later Name"), member("u1", "Other"))
    finding = detect(c)

    # first membership has no name, so the id is shown even though later ones carry names
    assert finding.duplicates["u1"].display_name == "u1"

    c = club("Renamed", member("u1", "First"), member("u1", "Second"))
    assert detect(c).duplicates["u1"].display_name == "First"


def test_duplicates_keep_first_occurrence_order():
    c = club("Order", member("u3"), member("u1"), member("u3"), member("u2"), member("u1"), member("u2"))
    assert list(detect(c).duplicates) == ["u3", "u1", "u2"]


def test_object_ids_and_their_strings_are_one_identity():
    oid = ObjectId()
    c = club("Mixed", member(oid, "Ann"), member(str(oid), "Ann"))
    finding = detect(c)

    assert finding.duplicates[str(oid)].count == 2


@pytest.mark.parametrize(
    "ids",
    [
        ["u1", "u1"],
        ["u1", "u2", "u1", "u2", "u2"],
        ["u1", "u1", "u1", "u1", "u2", "u3", "u3"],
    ],
)
def test_extra_memberships_match_duplicate_counts(ids):
    finding = detect(club("Conservation", *(member(user_id) for user_id in ids)))
    extra = sum(entry.count - 1 for entry in finding.duplicates.values())

    assert finding.total_members - finding.unique_members == extra
    assert finding.extra_memberships == extra


def test_summarize_aggregates_findings():
    a = detect(club("A", member("u1"), member("u1"), member("u1"), member("u2"), club_id="a"))
    b = detect(club("B", member("u5"), member("u5"), club_id="b"))

    summary = summarize(5, [a, b])

    assert summary.total_clubs == 5
    assert summary.clubs_with_duplicates == 2
    assert summary.extra_memberships == 3
    assert summary.has_duplicates


def test_summarize_without_findings():
    summary = summarize(0, [])

    assert (summary.total_clubs, summary.clubs_with_duplicates, summary.extra_memberships) == (0, 0, 0)
    assert not summary.has_duplicates
