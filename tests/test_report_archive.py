import pytest

from conftest import make_tickets
from core.exceptions import PreconditionFailed, ReportNotFound, RoomNotFound
from core.report_archive import REPORT_INDEX_KEY


def _estimate(room_manager, code, votes, points=None):
    for voter_id, value in votes:
        room_manager.vote(code, voter_id, voter_id.upper(), value)
    room_manager.reveal(code)
    if points is not None:
        room_manager.set_agreed_points(code, points)
    return room_manager.next_ticket(code)


def test_save_report_totals(room_manager, archive, planning_room):
    code = planning_room.code
    _estimate(room_manager, code, [("p1", 4), ("p2", 8)], points=5)

    report = archive.save_report(code, "Sprint 1", "Ann")

    assert report.name == "Sprint 1"
    assert report.room_code == code
    assert report.created_by == "Ann"
    assert report.total_tickets == 3
    assert report.estimated_tickets == 1
    assert report.total_points == 5
    assert report.average_points == 5.0
    assert report.participants == ["Ann"]
    first = report.tickets[0]
    assert first.key == "A-1"
    assert first.average_vote == 6.0
    assert [(v.voter_name, v.value) for v in first.votes] == [("P1", 4), ("P2", 8)]
    assert report.tickets[1].average_vote is None
    assert report.tickets[1].agreed_points is None


def test_average_points_rounded(room_manager, archive, planning_room):
    code = planning_room.code
    _estimate(room_manager, code, [("p1", 2)], points=2)
    _estimate(room_manager, code, [("p1", 4)], points=4)
    _estimate(room_manager, code, [("p1", 4)], points=4)

    report = archive.save_report(code, "Sprint 2", "Ann")
    assert report.total_points == 10
    assert report.estimated_tickets == 3
    assert report.average_points == 3.3


def test_save_report_with_nothing_estimated(room_manager, archive, planning_room):
    report = archive.save_report(planning_room.code, "Empty", "Ann")
    assert report.estimated_tickets == 0
    assert report.total_points == 0
    assert report.average_points == 0


def test_save_report_requires_tickets(archive, room):
    with pytest.raises(PreconditionFailed):
        archive.save_report(room.code, "Nothing", "Ann")


def test_save_report_missing_room(archive):
    with pytest.raises(RoomNotFound):
        archive.save_report("NOPE22", "Nothing", "Ann")


def test_report_is_a_snapshot(room_manager, archive, planning_room):
    code = planning_room.code
    room_manager.vote(code, "p1", "P1", 4)
    room_manager.reveal(code)
    room_manager.set_agreed_points(code, 4)
    saved = archive.save_report(code, "Snapshot", "Ann")

    room_manager.set_agreed_points(code, 16)
    room_manager.reset_votes(code)
    room_manager.vote(code, "p1", "P1", 16)
    room_manager.upload_tickets(code, make_tickets("Z-1"))

    loaded = archive.get_report(saved.id)
    assert loaded == saved
    assert loaded.tickets[0].agreed_points == 4
    assert loaded.total_tickets == 3


def test_report_outlives_room(room_manager, archive, store, planning_room):
    saved = archive.save_report(planning_room.code, "Keep", "Ann")
    store.delete(f"room:{planning_room.code}")

    assert archive.get_report(saved.id).name == "Keep"


def test_list_reports_newest_first(archive, planning_room):
    first = archive.save_report(planning_room.code, "First", "Ann")
    second = archive.save_report(planning_room.code, "Second", "Ann")

    items = archive.list_reports()
    assert [i.id for i in items] == [second.id, first.id]
    assert items[0].name == "Second"
    assert not hasattr(items[0], "tickets")


def test_report_ids_are_unique(archive, planning_room):
    ids = {archive.save_report(planning_room.code, f"R{i}", "Ann").id for i in range(20)}
    assert len(ids) == 20


def test_get_missing_report(archive):
    with pytest.raises(ReportNotFound):
        archive.get_report("report_0_missing")


def test_delete_report(archive, store, planning_room):
    keep = archive.save_report(planning_room.code, "Keep", "Ann")
    gone = archive.save_report(planning_room.code, "Gone", "Ann")

    archive.delete_report(gone.id)

    with pytest.raises(ReportNotFound):
        archive.get_report(gone.id)
    assert store.get(REPORT_INDEX_KEY) == [keep.id]
    assert [i.id for i in archive.list_reports()] == [keep.id]


def test_delete_missing_report_is_not_an_error(archive):
    archive.delete_report("report_0_missing")
    assert archive.list_reports() == []


def test_list_skips_reports_missing_from_store(archive, store, planning_room):
    saved = archive.save_report(planning_room.code, "Expired", "Ann")
    store.delete(f"report:{saved.id}")
    assert archive.list_reports() == []
    assert store.get(REPORT_INDEX_KEY) == []


def test_list_prunes_only_missing_ids_from_index(archive, store, planning_room):
    kept = archive.save_report(planning_room.code, "Kept", "Ann")
    expired = archive.save_report(planning_room.code, "Expired", "Ann")
    newest = archive.save_report(planning_room.code, "Newest", "Ann")
    store.delete(f"report:{expired.id}")

    assert [r.id for r in archive.list_reports()] == [newest.id, kept.id]
    assert store.get(REPORT_INDEX_KEY) == [newest.id, kept.id]
