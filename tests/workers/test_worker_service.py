import pytest

from src.smart_construction.smart_construction.core.exceptions import NotFoundError, ValidationError
from src.smart_construction.smart_construction.workers.bulk_edit import BulkWorkerEdit
from src.smart_construction.smart_construction.workers.model import Worker
from src.smart_construction.smart_construction.workers.service import WorkerService


@pytest.fixture
def service(workers, teams, sites, companies):
    return WorkerService(workers, teams, sites, companies)


def test_build_patch_resolves_names(teams, sites, companies):
    form = BulkWorkerEdit()
    form.set("team_id", "t-sup")
    form.set("site_id", "s-2")
    form.set("unit_price", "120000")

    patch = form.build_patch(teams=teams.list_all(), sites=sites.list_all(), companies=companies.list_all())

    assert patch == {
        "team_id": "t-sup",
        "team_name": "홍반장팀",
        "site_id": "s-2",
        "site_name": "판교현장",
        "unit_price": 120000.0,
    }


def test_checked_field_without_value_uses_default():
    form = BulkWorkerEdit()
    form.toggle("role")
    form.toggle("status")
    form.toggle("site_id")

    assert form.build_patch() == {"role": "일반", "status": "active", "site_id": None}


def test_toggle_twice_unchecks():
    form = BulkWorkerEdit()
    form.toggle("role")
    form.toggle("role")
    with pytest.raises(ValidationError):
        form.build_patch()


def test_unknown_field_rejected():
    with pytest.raises(ValidationError):
        BulkWorkerEdit.from_dict({"name": "x"})


def test_bad_unit_price_rejected():
    with pytest.raises(ValidationError):
        BulkWorkerEdit.from_dict({"unit_price": "abc"}).build_patch()


def test_bulk_update_writes_one_patch(service, workers):
    updated = service.bulk_update(["w-a", "w-b", "w-a", ""], BulkWorkerEdit.from_dict({"salary_model": "월급제"}))

    assert updated == 2
    assert workers.items["w-a"].salary_model == "월급제"
    assert workers.items["w-b"].salary_model == "월급제"
    assert workers.items["w-c"].salary_model == "지원팀"


def test_bulk_update_requires_workers(service):
    with pytest.raises(ValidationError):
        service.bulk_update([], BulkWorkerEdit.from_dict({"role": "반장"}))


def test_create_and_retire(service, workers):
    worker_id = service.create(Worker(id="", name=" 최신입 ", unit_price=90000, total_man_day=5))
    created = workers.items[worker_id]
    assert created.name == "최신입"
    assert created.total_man_day == 0

    service.retire(worker_id)
    assert workers.items[worker_id].status == "퇴사"


def test_update_validates_and_filters_fields(service, workers):
    service.update("w-a", {"unit_price": "110000", "total_man_day": 99})
    assert workers.items["w-a"].unit_price == 110000
    assert workers.items["w-a"].total_man_day == 0

    with pytest.raises(ValidationError):
        service.update("w-a", {"unit_price": -1})
    with pytest.raises(NotFoundError):
        service.update("w-missing", {"name": "x"})


def test_list_workers_filters(service):
    assert [w.id for w in service.list_workers(team_id="t-sup")] == ["w-c"]
