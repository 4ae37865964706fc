from libs.result import Result, Return, Error
from src.app.repositories.user_registration_repository import UserRegistrationRepository
from src.app.use_cases.pagination import clamp_page
from src.domain.errors import ErrorCode
from .dtos import ListRegistrationsResponseDTO, RegistrationResponseDTO


class ListPendingRegistrations:
    """Use Case: Registrations awaiting a decision (pending or verified), oldest first"""

    def __init__(self, registration_repo: UserRegistrationRepository):
        self.registration_repo = registration_repo

    async def execute(self, page: int = 1, page_size: int = 20) -> Result[ListRegistrationsResponseDTO]:
        page, page_size, offset = clamp_page(page, page_size)
        try:
            registrations, total = await self.registration_repo.list_pending(limit=page_size, offset=offset)
        except Exception as e:
            return Return.err(
                Error(code=ErrorCode.STORAGE_ERROR, message="Failed to list registrations", reason=str(e))
            )

        return Return.ok(
            ListRegistrationsResponseDTO(
                registrations=[RegistrationResponseDTO.from_entity(r) for r in registrations],
                total=total,
                page=page,
                page_size=page_size,
            )
        )
