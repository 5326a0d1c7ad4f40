from datetime import date

import pytest

from src.smart_construction.smart_construction.core.enums import AttendanceStatus
from src.smart_construction.smart_construction.core.exceptions import ValidationError
from src.smart_construction.smart_construction.reports.allocation_service import AllocationService
from src.smart_construction.smart_construction.reports.allocator import AllocationBoard, DropTarget
from src.smart_construction.smart_construction.reports.model import DailyReport, ReportWorker
from src.smart_construction.smart_construction.reports.service import DailyReportService

DAY = date(2025, 3, 14)


@pytest.fixture
def board(teams, sites, workers):
    return AllocationBoard(day=DAY, teams=teams.list_all(), sites=sites.list_all(), workers=workers.list_all())


def test_workers_start_in_team_pools(board):
    assert {i.temp_id for i in board.unassigned("t-main")} == {"w-a", "w-b"}
    assert [i.temp_id for i in board.unassigned("t-sup")] == ["w-c"]
    assert not any(i.is_confirmed for i in board.items)


def test_quick_assign_confirms_moved_workers(board):
    board.toggle_select("w-a")
    board.toggle_select("w-b")

    moved = board.quick_assign("s-1")

    assert moved == 2
    assert all(i.is_confirmed and i.current_site_id == "s-1" for i in board.assigned_to("s-1"))
    assert board.selected == set()


def test_quick_assign_requires_site_and_selection(board):
    with pytest.raises(ValidationError):
        board.quick_assign()
    with pytest.raises(ValidationError):
        board.quick_assign("s-1")


def test_selecting_unassigned_after_assigned_restarts_selection(board):
    board.toggle_select("w-a")
    board.quick_assign("s-1")
    board.toggle_select("w-a")

    board.toggle_select("w-b")

    assert board.selected == {"w-b"}


def test_toggle_select_twice_deselects(board):
    board.toggle_select("w-a")
    board.toggle_select("w-a")
    assert board.selected == set()


def test_select_all_unassigned_toggles(board):
    board.select_all_unassigned("t-main")
    assert board.selected == {"w-a", "w-b"}
    board.select_all_unassigned("t-main")
    assert board.selected == set()


def test_double_click_moves_back_to_pool_and_clears_confirmed(board):
    board.target_site_id = "s-2"
    board.double_click("w-c")
    assert board.item("w-c").current_site_id == "s-2"
    assert board.item("w-c").is_confirmed

    board.double_click("w-c")
    item = board.item("w-c")
    assert item.current_site_id is None
    assert item.is_confirmed is False
    assert [i.temp_id for i in board.unassigned("t-sup")] == ["w-c"]


def test_double_click_without_target_site(board):
    with pytest.raises(ValidationError):
        board.double_click("w-a")


def test_drag_selection_onto_worker_inserts_before(board):
    board.target_site_id = "s-1"
    board.double_click("w-c")

    board.toggle_select("w-a")
    board.toggle_select("w-b")
    board.drag_start("w-a")
    moved = board.drag_end("w-a", DropTarget.onto_worker("w-c"))

    assert moved == 2
    assert [i.temp_id for i in board.assigned_to("s-1")] == ["w-a", "w-b", "w-c"]
    assert board.selected == set()


def test_drag_single_unselected_worker_to_pool(board):
    board.toggle_select("w-a")
    board.quick_assign("s-1")
    board.toggle_select("w-b")

    board.drag_start("w-a")
    assert board.selected == {"w-a"}
    board.drag_end("w-a", DropTarget.to_pool())

    assert board.item("w-a").is_confirmed is False
    assert board.item("w-b").current_site_id is None


def test_site_change_resets_man_day(board):
    board.assign_worker("w-a", "s-1", man_day=0.5)
    assert board.item("w-a").man_day == 0.5

    board.assign_worker("w-a", "s-2")
    assert board.item("w-a").man_day == 1.0


def test_update_item_rejects_negative_man_day(board):
    with pytest.raises(ValidationError):
        board.update_item("w-a", man_day=-1)
    with pytest.raises(ValidationError):
        board.update_item("w-a", man_day="abc")


def test_apply_previous_assignments(board):
    applied = board.apply_previous_assignments({"w-a": "s-2", "w-b": "s-missing"})

    assert applied == 1
    assert board.item("w-a").current_site_id == "s-2"
    assert board.item("w-b").current_site_id is None

    with pytest.raises(ValidationError):
        board.apply_previous_assignments({})


def test_reset_all_returns_everyone(board):
    board.apply_previous_assignments({"w-a": "s-1", "w-c": "s-2"})
    board.reset_all()
    assert not any(i.is_assigned for i in board.items)


def test_copy_previous_day_and_reset_keep_man_day(board):
    board.update_item("w-a", man_day=0.5)
    board.update_item("w-b", man_day=1.5)

    board.apply_previous_assignments({"w-a": "s-1", "w-b": "s-2"})
    assert board.item("w-a").man_day == 0.5
    assert board.item("w-b").man_day == 1.5
    assert board.item("w-b").is_confirmed

    board.reset_all()
    assert board.item("w-a").man_day == 0.5
    assert not board.item("w-a").is_confirmed

    board.assign_worker("w-a", "s-2")
    assert board.item("w-a").man_day == 1.0


def test_move_site_card_between_columns(board):
    source = next(i for i, c in enumerate(board.columns) if "s-1" in c)
    target = (source + 1) % len(board.columns)

    board.move_site_card("s-1", column=target, index=0)

    assert board.columns[target][0] == "s-1"
    assert "s-1" not in board.columns[source]
    with pytest.raises(ValidationError):
        board.move_site_card("s-1", column=len(board.columns))


def test_load_then_build_reports_groups_by_site_and_team(board):
    board.load_reports(
        [
            DailyReport(
                id="r1",
                date=DAY,
                team_id="t-main",
                team_name="본팀",
                site_id="s-1",
                site_name="강남현장",
                workers=(ReportWorker("w-a", "김철수", man_day=0.5, status=AttendanceStatus.HALF),),
                work_content="골조",
                weather="맑음",
            )
        ]
    )
    board.target_site_id = "s-1"
    board.double_click("w-c")

    reports = {(r.site_id, r.team_id): r for r in board.build_reports(writer_id="admin")}

    main = reports[("s-1", "t-main")]
    assert [w.worker_id for w in main.workers] == ["w-a"]
    assert main.total_man_day == 0.5
    assert main.total_amount == 50000
    assert main.work_content == "골조"
    assert main.weather == "맑음"

    support = reports[("s-1", "t-sup")]
    assert support.workers[0].salary_model == "지원팀"
    assert support.writer_id == "admin"


def test_as_dict_shape(board):
    board.toggle_select("w-a")
    state = board.as_dict()
    assert state["date"] == "2025-03-14"
    assert set(state["items"]) == {"w-a", "w-b", "w-c"}
    assert state["selected"] == ["w-a"]


def test_allocation_service_copies_previous_day_and_saves(reports, workers, teams, sites, companies):
    report_service = DailyReportService(reports, workers, teams, sites, companies)
    report_service.add_report(
        DailyReport(
            id="",
            date=date(2025, 3, 13),
            team_id="t-main",
            team_name="본팀",
            site_id="s-2",
            site_name="판교현장",
            workers=(ReportWorker("w-b", "이영희"),),
            total_man_day=1,
        )
    )
    service = AllocationService(report_service, workers, teams, sites)

    board = service.load_board(DAY, team_ids=["t-main"])
    assert service.copy_previous_day(board, ["t-main"]) == 1
    assert board.item("w-b").current_site_id == "s-2"

    assert service.save(board, writer_id="admin") == 1
    saved = report_service.get_reports(DAY)
    assert [(r.site_id, r.team_id) for r in saved] == [("s-2", "t-main")]

    with pytest.raises(ValidationError):
        service.previous_assignments([])
