from pydantic import BaseModel, ConfigDict, EmailStr, field_validator, model_validator
from typing import Optional
from datetime import datetime
from urllib.parse import urlparse

class UserBase(BaseModel):
    name: str
    email: EmailStr

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Name is required')
        return v

class UserCreate(UserBase):
    password: str

    @field_validator('password')
    @classmethod
    def validate_password(cls, v):
        if len(v) < 6:
            raise ValueError('Password must be at least 6 characters')
        return v

class UserLogin(BaseModel):
    email: str = ""
    password: str = ""

class UserSummary(BaseModel):
    """用户列表项，只暴露 id 和 name"""
    id: str
    name: str

    model_config = ConfigDict(from_attributes=True)

class UserProfile(BaseModel):
    id: str
    name: str
    email: str
    image: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class ProfileUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError('Name cannot be blank')
        return v

    @model_validator(mode='after')
    def check_not_empty(self):
        if self.name is None and self.email is None:
            raise ValueError('Nothing to update')
        return self

class PasswordChange(BaseModel):
    old_password: str
    new_password: str
    confirm_password: Optional[str] = None

    @field_validator('new_password')
    @classmethod
    def validate_new_password(cls, v):
        if len(v) < 6:
            raise ValueError('Password must be at least 6 characters')
        return v

    @model_validator(mode='after')
    def check_confirm(self):
        if self.confirm_password is not None and self.confirm_password != self.new_password:
            raise ValueError('Passwords do not match')
        return self

class ProfilePictureUpdate(BaseModel):
    image_url: str

    @field_validator('image_url')
    @classmethod
    def validate_image_url(cls, v):
        v = v.strip()
        parsed = urlparse(v)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError('Invalid image URL')
        return v

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int

class RefreshRequest(BaseModel):
    refresh_token: str

class SessionContext(BaseModel):
    """当前会话 {id, name, email, image}，显式传递给服务和调度器"""
    id: str
    name: str
    email: str
    image: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

class LoginResponse(TokenResponse):
    refresh_token: str
    session: SessionContext
