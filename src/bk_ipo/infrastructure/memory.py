"""In-memory IPO book."""

from src.bk_common.enums import IpoApplicationStatus
from src.bk_ipo.domain.models import Ipo, IpoApplication


class InMemoryIpoRepository:
    def __init__(self) -> None:
        self._ipos: dict[str, Ipo] = {}
        self._applications: dict[str, IpoApplication] = {}

    def get_ipo(self, ipo_id: str) -> Ipo | None:
        return self._ipos.get(ipo_id)

    def save_ipo(self, ipo: Ipo) -> None:
        self._ipos[ipo.id] = ipo

    def list_ipos(self) -> list[Ipo]:
        return list(self._ipos.values())

    def get_application(self, application_id: str) -> IpoApplication | None:
        return self._applications.get(application_id)

    def save_application(self, application: IpoApplication) -> None:
        self._applications[application.id] = application

    def list_applications(
        self,
        ipo_id: str | None = None,
        account_id: str | None = None,
        status: IpoApplicationStatus | None = None,
    ) -> list[IpoApplication]:
        items = [
            a
            for a in self._applications.values()
            if (ipo_id is None or a.ipo_id == ipo_id)
            and (account_id is None or a.account_id == account_id)
            and (status is None or a.status == status)
        ]
        return sorted(items, key=lambda a: a.applied_at, reverse=True)
