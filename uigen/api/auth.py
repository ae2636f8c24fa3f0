# uigen/api/auth.py
"""
Authentication routes. Accounts are not supported yet; every route answers 501.
"""
from fastapi import APIRouter
from starlette.responses import JSONResponse

router = APIRouter(prefix="/auth", tags=["Auth"])


def not_implemented(feature: str) -> JSONResponse:
    return JSONResponse(
        status_code=501,
        content={"success": False, "message": f"{feature} not implemented yet", "data": None},
    )


@router.post("/register")
async def register():
    return not_implemented("User registration")


@router.post("/login")
async def login():
    return not_implemented("User login")


@router.post("/logout")
async def logout():
    return not_implemented("User logout")


@router.post("/refresh")
async def refresh():
    return not_implemented("Token refresh")


@router.get("/profile")
async def profile():
    return not_implemented("Get user profile")
