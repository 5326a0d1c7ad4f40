import pytest

from src.smart_construction.smart_construction.common.events import MasterDataChanged
from src.smart_construction.smart_construction.common.romanization import (
    build_ceo_abbreviation,
    build_partner_display_name,
    strip_abbreviation,
)
from src.smart_construction.smart_construction.core.enums import CompanyType
from src.smart_construction.smart_construction.core.exceptions import PartialWriteError, ValidationError
from src.smart_construction.smart_construction.registration.forms import (
    CompanyForm,
    PartnerCompanyForm,
    SiteForm,
    TeamForm,
    WorkerForm,
)
from src.smart_construction.smart_construction.registration.service import PRIMARY_PINNED, QuickRegisterService


@pytest.fixture
def published(events):
    seen = []
    events.subscribe(MasterDataChanged, seen.append)
    return seen


@pytest.fixture
def service(companies, teams, sites, workers, events, fixed_now):
    return QuickRegisterService(companies, teams, sites, workers, events, primary_keyword="청연", clock=lambda: fixed_now)


def test_ceo_abbreviation():
    assert build_ceo_abbreviation("홍길동") == "HGD"
    assert build_ceo_abbreviation("John Smith") == "JS"
    assert build_ceo_abbreviation("  ") == ""


def test_partner_display_name():
    assert build_partner_display_name("건설", "홍길동") == "(HGD) 홍길동 건설"
    assert build_partner_display_name("(HGD) 홍길동 건설", "홍길동") == "(HGD) 홍길동 건설"
    assert build_partner_display_name("", "홍길동") == "(HGD) 홍길동"
    assert strip_abbreviation("(ABC) 회사") == "회사"


def test_construction_worker_pinned_to_primary(service):
    form = WorkerForm(name="신입", id_number="990101", company_id="c-pt", role="신규")
    with pytest.raises(ValidationError) as exc:
        service.register_worker(form)
    assert str(exc.value) == PRIMARY_PINNED


def test_worker_form_collects_every_issue(service):
    form = WorkerForm(name="", id_number="", unit_price=-1, role="")
    with pytest.raises(ValidationError) as exc:
        service.register_worker(form)
    assert exc.value.issues[:2] == ["작업자 이름을 입력해주세요.", "작업자 식별번호(주민/생년)를 입력해주세요."]
    assert "단가는 0 이상이어야 합니다." in exc.value.issues


def test_register_construction_worker(service, workers, published):
    worker_id = service.register_worker(
        WorkerForm(name=" 신입 ", id_number="990101", company_id="c-cy", role="신규", unit_price="130000")
    )

    worker = workers.items[worker_id]
    assert worker.name == "신입"
    assert worker.company_name == "청연건설"
    assert worker.unit_price == 130000
    assert worker.status == "재직"
    assert published == [MasterDataChanged(workers=True)]


def test_support_worker_forces_salary_model_and_takes_team(service, workers):
    form = WorkerForm(
        name="지원",
        id_number="880101",
        team_type="지원팀",
        company_id="c-pt",
        support_team_id="t-sup",
        salary_model="일급제",
        role="일반",
    )
    worker_id = service.register_worker(form)

    worker = workers.items[worker_id]
    assert worker.salary_model == "지원팀"
    assert worker.team_id == "t-sup"
    assert worker.company_id == "c-pt"
    assert form.salary_model == "일급제"


def test_support_worker_requires_partner_company(service):
    form = WorkerForm(name="지원", id_number="1", team_type="지원팀", company_id="c-cy", support_team_id="t-sup", role="일반")
    with pytest.raises(ValidationError):
        service.register_worker(form)


def test_team_leader_must_be_selected(service):
    form = TeamForm(name="새팀", company_id="c-cy", leader_worker_id="w-a", selected_worker_ids=["w-b"])
    with pytest.raises(ValidationError) as exc:
        service.register_team(form)
    assert "팀장은 선택한 작업자에 포함되어야 합니다." in exc.value.issues


def test_register_team_moves_members(service, teams, workers, published):
    team_id = service.register_team(
        TeamForm(name="새팀", company_id="c-cy", leader_worker_id="w-a", selected_worker_ids=["w-a", "w-b"])
    )

    team = teams.items[team_id]
    assert team.member_ids == ("w-a", "w-b")
    assert team.leader_name == "김철수"
    assert workers.items["w-b"].team_id == team_id
    assert workers.items["w-b"].leader_name == "김철수"
    assert published == [MasterDataChanged(teams=True, workers=True)]


def test_team_member_update_failure_is_partial_write(service, teams, workers, published):
    workers.fail_update = True
    snapshot = service.load_snapshot()

    with pytest.raises(PartialWriteError) as exc:
        service.register_team(TeamForm(name="새팀", company_id="c-cy", selected_worker_ids=["w-a"]), snapshot)

    assert exc.value.written_id in teams.items
    assert snapshot.worker("w-a").team_id == "t-main"
    assert published == []


def test_register_site(service, sites):
    site_id = service.register_site(
        SiteForm(name="신규현장", start_date="2025-03-01", end_date="2025-12-31", company_id="c-cy", responsible_team_id="t-main")
    )
    site = sites.items[site_id]
    assert site.code.startswith("SITE-")
    assert site.responsible_team_name == "본팀"


def test_site_team_must_belong_to_company(service):
    form = SiteForm(name="현장", start_date="2025-03-01", end_date="2025-03-31", company_id="c-cy", responsible_team_id="t-sup")
    with pytest.raises(ValidationError):
        service.register_site(form)


def test_site_bad_date(service):
    with pytest.raises(ValidationError):
        service.register_site(SiteForm(name="현장", start_date="2025/03/01", end_date="2025-03-31"))


def test_register_partner_company_creates_support_team(service, companies, teams):
    form = PartnerCompanyForm(
        company=CompanyForm(name="건설", business_number="123-45-67890", ceo_name="이순신", phone="010"),
        team_name="이반장팀",
    )

    result = service.register_partner_company(form)

    company = companies.items[result.company_id]
    assert company.name == "(NGSS) 이순신 건설"
    assert company.type == CompanyType.PARTNER
    assert company.code.startswith("PTN-")
    assert teams.items[result.team_id].company_id == result.company_id


def test_partner_team_failure_keeps_company(service, companies, teams, published):
    teams.fail_create = True
    form = PartnerCompanyForm(
        company=CompanyForm(name="건설", business_number="1", ceo_name="이순신", phone="010"),
        team_name="이반장팀",
    )

    with pytest.raises(PartialWriteError) as exc:
        service.register_partner_company(form)

    assert exc.value.written_id in companies.items
    assert published == []


def test_construction_company_requires_fields(service):
    with pytest.raises(ValidationError) as exc:
        service.register_construction_company(CompanyForm(name="회사"))
    assert len(exc.value.issues) == 3
