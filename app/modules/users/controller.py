from fastapi import APIRouter

from app.core.dependencies import DatabaseDep, UserServiceDep
from app.core.exceptions import UserNotFoundError, ValidationError
from app.modules.users.dto import CreateUserDto, UserResponseDto
from app.modules.users.types import FindOrCreateResult

router = APIRouter(prefix="/users", tags=["users"])


@router.post("/", response_model=UserResponseDto)
async def create_user(
    user_data: CreateUserDto,
    db: DatabaseDep,
    user_service: UserServiceDep,
) -> UserResponseDto:
    """Register a WhatsApp number, or return the existing user"""
    if not user_data.whatsapp_number.strip():
        raise ValidationError("WhatsApp number is required")

    result: FindOrCreateResult = await user_service.find_or_create(db, user_data)
    return UserResponseDto.model_validate(result["user"])


@router.get("/{user_id}", response_model=UserResponseDto)
async def get_user(
    user_id: int,
    db: DatabaseDep,
    user_service: UserServiceDep,
) -> UserResponseDto:
    """Get user by ID"""
    if user_id <= 0:
        raise ValidationError("User ID must be a positive integer")

    user = await user_service.get_user_by_id(db, user_id)
    if not user:
        raise UserNotFoundError(user_id)

    return UserResponseDto.model_validate(user)
