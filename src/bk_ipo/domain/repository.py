"""Repository Protocol for the IPO book and applications."""

from typing import Protocol

from src.bk_common.enums import IpoApplicationStatus
from src.bk_ipo.domain.models import Ipo, IpoApplication


class IpoRepositoryProtocol(Protocol):
    def get_ipo(self, ipo_id: str) -> Ipo | None: ...

    def save_ipo(self, ipo: Ipo) -> None: ...

    def list_ipos(self) -> list[Ipo]: ...

    def get_application(self, application_id: str) -> IpoApplication | None: ...

    def save_application(self, application: IpoApplication) -> None: ...

    def list_applications(
        self,
        ipo_id: str | None = None,
        account_id: str | None = None,
        status: IpoApplicationStatus | None = None,
    ) -> list[IpoApplication]: ...
