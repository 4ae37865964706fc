"""Registration API Routes

Self-service sign-up with email verification and admin approval.
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.api.schemas.registration_request import VerifyRegistrationRequestSchema
from src.app.use_cases.registration.dtos import (
    ApproveRegistrationResponseDTO,
    CreateRegistrationCommandDTO,
    ListRegistrationsResponseDTO,
    RegistrationResponseDTO,
    SendVerificationCodeCommandDTO,
    VerificationCodeSentDTO,
    VerifyCodeCommandDTO,
)
from src.app.use_cases.registration.create_registration import CreateRegistration
from src.app.use_cases.registration.verify_registration import VerifyRegistration
from src.app.use_cases.registration.approve_registration import ApproveRegistration
from src.app.use_cases.registration.reject_registration import RejectRegistration
from src.app.use_cases.registration.list_pending_registrations import ListPendingRegistrations
from src.app.use_cases.registration.send_verification_code import SendVerificationCode
from src.app.use_cases.registration.verify_code import VerifyCode
from src.app.services.notification_service import NotificationService
from src.adapter.repositories.user_registration_repository import (
    SqlAlchemyUserRegistrationRepository,
    SqlAlchemyUserRepository,
    SqlAlchemyVerificationCodeRepository,
)
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.depends import build_ledger, get_notification_service, get_session, require_admin
from src.api.error import ClientError

router = APIRouter(prefix="/registrations", tags=["Registrations"])


@router.post("", response_model=RegistrationResponseDTO, status_code=status.HTTP_201_CREATED)
async def create_registration(
    command: CreateRegistrationCommandDTO,
    session: AsyncSession = Depends(get_session),
    notification_service: NotificationService = Depends(get_notification_service),
):
    """
    Sign up.

    A verification link is sent to the email address. After verifying, the
    registration waits for an admin to approve it.

    **Returns:**
    - 201: PENDING registration
    - 409: Username or email already taken
    """
    use_case = CreateRegistration(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyUserRegistrationRepository(session),
        SqlAlchemyUserRepository(session),
        notification_service=notification_service,
        ttl_hours=ApplicationConfig.REGISTRATION_TTL_HOURS,
        verification_base_url=ApplicationConfig.VERIFICATION_BASE_URL,
    )
    result = await use_case.execute(command)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.post("/verify", response_model=RegistrationResponseDTO, status_code=status.HTTP_200_OK)
async def verify_registration(
    request: VerifyRegistrationRequestSchema,
    session: AsyncSession = Depends(get_session),
):
    """
    Confirm the email address with the token from the verification link.

    **Returns:**
    - 200: Registration is VERIFIED
    - 404: Unknown token
    - 409: Already verified, approved or rejected
    - 410: Link expired
    """
    use_case = VerifyRegistration(SqlAlchemyUnitOfWork(session), SqlAlchemyUserRegistrationRepository(session))
    result = await use_case.execute(request.token)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.get("/pending", response_model=ListRegistrationsResponseDTO, status_code=status.HTTP_200_OK)
async def list_pending_registrations(
    page: int = Query(default=1),
    page_size: int = Query(default=20),
    admin_id: Optional[int] = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    use_case = ListPendingRegistrations(SqlAlchemyUserRegistrationRepository(session))
    result = await use_case.execute(page=page, page_size=page_size)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.post(
    "/{registration_id}/approve",
    response_model=ApproveRegistrationResponseDTO,
    status_code=status.HTTP_200_OK,
)
async def approve_registration(
    registration_id: int,
    admin_id: Optional[int] = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    """
    Approve a verified registration (admin only).

    Creates the user and an empty credit account.
    """
    use_case = ApproveRegistration(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyUserRegistrationRepository(session),
        SqlAlchemyUserRepository(session),
        build_ledger(session),
    )
    result = await use_case.execute(registration_id)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.post(
    "/{registration_id}/reject",
    response_model=RegistrationResponseDTO,
    status_code=status.HTTP_200_OK,
)
async def reject_registration(
    registration_id: int,
    admin_id: Optional[int] = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    use_case = RejectRegistration(SqlAlchemyUnitOfWork(session), SqlAlchemyUserRegistrationRepository(session))
    result = await use_case.execute(registration_id)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.post("/codes", response_model=VerificationCodeSentDTO, status_code=status.HTTP_201_CREATED)
async def send_verification_code(
    command: SendVerificationCodeCommandDTO,
    session: AsyncSession = Depends(get_session),
    notification_service: NotificationService = Depends(get_notification_service),
):
    """Send a 6-digit one-time code to an email address."""
    use_case = SendVerificationCode(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyVerificationCodeRepository(session),
        notification_service=notification_service,
        ttl_minutes=ApplicationConfig.VERIFICATION_CODE_TTL_MINUTES,
    )
    result = await use_case.execute(command)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.post("/codes/verify", status_code=status.HTTP_200_OK)
async def verify_code(
    command: VerifyCodeCommandDTO,
    session: AsyncSession = Depends(get_session),
):
    """
    Check and consume a one-time code.

    **Returns:**
    - 200: `{"verified": true}`
    - 400: Wrong code
    - 404: No usable code for this email
    - 410: Code expired
    """
    use_case = VerifyCode(SqlAlchemyUnitOfWork(session), SqlAlchemyVerificationCodeRepository(session))
    result = await use_case.execute(command)

    if result.is_err():
        raise ClientError(result.error)

    return {"verified": True}
