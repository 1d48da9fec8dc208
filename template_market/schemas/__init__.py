"""Pydantic schemas used across the project."""
from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from template_market.modules.templates import TemplateStatus


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    email: str = Field(..., min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(..., min_length=6)


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(..., min_length=1)


class RefreshRequest(BaseModel):
    refresh_token: str


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class AccountResponse(BaseModel):
    id: str
    username: str
    email: str
    role: str
    is_active: bool
    created_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class RegisterResponse(TokenResponse):
    account: AccountResponse


class AccountRoleUpdate(BaseModel):
    role: Literal["user", "admin"]


class TemplateBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    tags: list[str] = Field(default_factory=list)
    category: Optional[str] = Field(default=None, max_length=100)
    tech_stack: Optional[str] = Field(default=None, max_length=100)
    price: Decimal = Field(default=Decimal("0"), ge=0)
    preview_image_url: Optional[str] = None
    download_url: Optional[str] = None
    is_premium: bool = False


class TemplateCreate(TemplateBase):
    pass


class TemplateUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    tags: Optional[list[str]] = None
    category: Optional[str] = Field(default=None, max_length=100)
    tech_stack: Optional[str] = Field(default=None, max_length=100)
    price: Optional[Decimal] = Field(default=None, ge=0)
    preview_image_url: Optional[str] = None
    download_url: Optional[str] = None
    is_premium: Optional[bool] = None


class TemplateResponse(TemplateBase):
    id: str
    status: TemplateStatus
    admin_comment: Optional[str] = None
    created_by: str
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    demo_url: Optional[str] = None
    has_live_demo: bool = False
    demo_deployment_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class TemplateListResponse(BaseModel):
    total: int
    page: int
    page_size: int
    items: list[TemplateResponse]


class TemplateStatusUpdate(BaseModel):
    status: TemplateStatus
    admin_comment: Optional[str] = Field(default=None, max_length=2000)


class DemoResponse(BaseModel):
    demo_url: str


class DemoDetailsResponse(BaseModel):
    has_demo: bool
    demo_url: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class UploadResponse(BaseModel):
    key: str
    url: str
    content_type: Optional[str] = None
    size_bytes: int
    checksum_sha256: str

    model_config = ConfigDict(from_attributes=True)


class SuccessResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
