from fastapi import APIRouter, Depends, HTTPException, status, Query, Header, Response
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from routers.auth.auth import get_current_user, get_current_user_id
from routers.auth.helpers import auth_helpers
from dependencies.rbac import (
    require_application_write, require_application_delete, require_internal_secret,
    is_internal_request, has_permission
)
from .repository import ApplicationRepository, get_application_repository, FILTER_ALL
from .schemas import (
    ApplicationCreate, ApplicationUpdate, ApplicationResponse, ApplicationListResponse,
    ApplicationUpdateResponse, ContractInformationResponse
)
from models import ApplicationStatusEnum
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/applications", tags=["Applications"])

optional_security = HTTPBearer(auto_error=False)


def paginate(applications: List[ApplicationResponse], first: int, last: int) -> ApplicationListResponse:
    """Slice a result list; `last` of 0 means no limit"""
    page = applications[first:first + last] if last else applications[first:]
    return ApplicationListResponse(count=len(applications), list=page)


@router.post("", response_model=ApplicationResponse, status_code=status.HTTP_201_CREATED)
async def create_application(
    application_data: ApplicationCreate,
    current_user: dict = Depends(get_current_user),
    _: bool = Depends(require_application_write),
    repository: ApplicationRepository = Depends(get_application_repository)
):
    """Apply for a product (receivers only)"""
    if application_data.user_id != get_current_user_id(current_user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Applications can only be created for yourself"
        )

    application = await repository.create(application_data)

    if application is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Application could not be created"
        )

    return application


@router.get("", response_model=ApplicationListResponse)
async def get_open_applications(
    first: int = Query(0, ge=0),
    last: int = Query(0, ge=0),
    repository: ApplicationRepository = Depends(get_application_repository)
):
    return paginate(await repository.read_open(), first, last)


@router.get("/filter", response_model=ApplicationListResponse)
async def get_filtered_applications(
    country: str = Query(FILTER_ALL),
    city: str = Query(FILTER_ALL),
    first: int = Query(0, ge=0),
    last: int = Query(0, ge=0),
    repository: ApplicationRepository = Depends(get_application_repository)
):
    """Open applications by producer country and city"""
    return paginate(await repository.read_filtered(country, city), first, last)


@router.get("/completed", response_model=ApplicationListResponse)
async def get_completed_applications(
    first: int = Query(0, ge=0),
    last: int = Query(0, ge=0),
    repository: ApplicationRepository = Depends(get_application_repository)
):
    return paginate(await repository.read_completed(), first, last)


@router.get("/countries", response_model=List[str])
async def get_countries(
    repository: ApplicationRepository = Depends(get_application_repository)
):
    return await repository.get_countries()


@router.get("/cities", response_model=List[str])
async def get_cities(
    country: str = Query(...),
    repository: ApplicationRepository = Depends(get_application_repository)
):
    return await repository.get_cities(country)


@router.get("/contractinfo/{application_id}", response_model=ContractInformationResponse)
async def get_contract_information(
    application_id: int,
    _: bool = Depends(require_internal_secret),
    repository: ApplicationRepository = Depends(get_application_repository)
):
    contract_information = await repository.get_contract_information(application_id)

    if contract_information is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Application not found"
        )

    return contract_information


@router.get("/receiver/{receiver_id}", response_model=List[ApplicationResponse])
async def get_receiver_applications(
    receiver_id: int,
    repository: ApplicationRepository = Depends(get_application_repository)
):
    return await repository.read(receiver_id)


@router.get("/{application_id}", response_model=ApplicationResponse)
async def get_application(
    application_id: int,
    repository: ApplicationRepository = Depends(get_application_repository)
):
    application = await repository.find(application_id)

    if application is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Application not found"
        )

    return application


@router.put("", response_model=ApplicationUpdateResponse)
async def update_application(
    application_data: ApplicationUpdate,
    x_internal_secret: Optional[str] = Header(None),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_security),
    repository: ApplicationRepository = Depends(get_application_repository)
):
    """
    Change the status of an application.

    The chatbot calls this with the internal secret when a donation is made;
    a receiver may only move its own Pending application to Completed.
    """
    if not is_internal_request(x_internal_secret):
        if credentials is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Authentication required"
            )

        current_user = auth_helpers.verify_token(credentials.credentials)
        if not has_permission(current_user["role"] or "", "applications", "write"):
            logger.warning(f"Access denied - User: {current_user['role']}, Resource: applications, Permission: write")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Only receivers can change their applications"
            )

        application = await repository.find(application_data.application_id)
        if application is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Application not found"
            )

        if application.receiver_id != get_current_user_id(current_user):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You can only change your own applications"
            )

        # receivers may only confirm receipt of a donation
        if application.status != ApplicationStatusEnum.PENDING or application_data.status != ApplicationStatusEnum.COMPLETED:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Only a pending application can be marked as completed"
            )

        application_data = application_data.model_copy(update={"unit_id": None})

    try:
        status_changed, (email_sent, email_error) = await repository.update(application_data)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Application update failed for {application_data.application_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update application"
        )

    if not status_changed:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Application not found"
        )

    return ApplicationUpdateResponse(
        status_changed=status_changed,
        email_sent=email_sent,
        email_error=email_error
    )


@router.delete("/{application_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_application(
    application_id: int,
    current_user: dict = Depends(get_current_user),
    _: bool = Depends(require_application_delete),
    repository: ApplicationRepository = Depends(get_application_repository)
):
    user_id = get_current_user_id(current_user)

    application = await repository.find(application_id)
    if application is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Application not found"
        )

    if application.receiver_id != user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only delete your own applications"
        )

    if not await repository.delete(user_id, application_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only open applications can be deleted"
        )

    return Response(status_code=status.HTTP_204_NO_CONTENT)
