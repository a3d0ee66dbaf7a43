from fastapi import APIRouter, Depends, HTTPException, status, UploadFile, File, Form, Response
from routers.auth.auth import get_current_user, get_current_user_id
from dependencies.rbac import require_internal_secret
from .repository import UserRepository, get_user_repository
from .schemas import (
    UserUpdate,
    UserPairing,
    DetailedUserResponse,
    ProfileImageUpload,
    CountResponse,
)
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/me", response_model=DetailedUserResponse)
async def get_me(
    current_user: dict = Depends(get_current_user),
    repository: UserRepository = Depends(get_user_repository)
):
    """Profile of the authenticated user"""
    user = await repository.find(get_current_user_id(current_user))

    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )

    return user


@router.get("/producers/count", response_model=CountResponse)
async def get_producer_count(
    repository: UserRepository = Depends(get_user_repository)
):
    return CountResponse(count=await repository.get_count_producers())


@router.get("/receivers/count", response_model=CountResponse)
async def get_receiver_count(
    repository: UserRepository = Depends(get_user_repository)
):
    return CountResponse(count=await repository.get_count_receivers())


@router.get("/{user_id}", response_model=DetailedUserResponse)
async def get_user(
    user_id: int,
    current_user: dict = Depends(get_current_user),
    repository: UserRepository = Depends(get_user_repository)
):
    user = await repository.find(user_id)

    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )

    return user


@router.put("/image", response_model=ProfileImageUpload)
async def update_profile_image(
    user_id: int = Form(...),
    file: UploadFile = File(...),
    current_user: dict = Depends(get_current_user),
    repository: UserRepository = Depends(get_user_repository)
):
    """Replace the profile picture of the authenticated user"""
    if get_current_user_id(current_user) != user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only change your own profile picture"
        )

    try:
        thumbnail = await repository.update_image(user_id, file)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Profile image upload failed for user {user_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Upload failed: {str(e)}"
        )

    if thumbnail is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )

    return ProfileImageUpload(thumbnail=thumbnail, message="Profile image updated")


@router.put("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def update_user(
    user_id: int,
    user_data: UserUpdate,
    current_user: dict = Depends(get_current_user),
    repository: UserRepository = Depends(get_user_repository)
):
    if get_current_user_id(current_user) != user_id or user_data.user_id != user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only update your own profile"
        )

    if not await repository.update(user_data):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found or password is wrong"
        )

    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/wallet", status_code=status.HTTP_204_NO_CONTENT)
async def pair_device(
    pairing: UserPairing,
    _: bool = Depends(require_internal_secret),
    repository: UserRepository = Depends(get_user_repository)
):
    """Called by the chatbot once a producer opened its pairing link"""
    if not await repository.update_device_address(pairing):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No producer with that pairing secret"
        )

    return Response(status_code=status.HTTP_204_NO_CONTENT)
