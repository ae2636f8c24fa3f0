# uigen/api/users.py
"""
User management routes (501 until accounts exist).
"""
from fastapi import APIRouter

from uigen.api.auth import not_implemented

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("")
async def list_users():
    return not_implemented("Get users list")


@router.get("/{user_id}")
async def get_user(user_id: str):
    return not_implemented(f"Get user {user_id}")


@router.put("/{user_id}")
async def update_user(user_id: str):
    return not_implemented(f"Update user {user_id}")


@router.delete("/{user_id}")
async def delete_user(user_id: str):
    return not_implemented(f"Delete user {user_id}")
