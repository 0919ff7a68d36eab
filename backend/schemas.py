# backend/schemas.py
from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List
from datetime import datetime, date

# ---------- Users ----------
class SignupIn(BaseModel):
    first_name: str
    last_name: Optional[str] = ""
    email: EmailStr
    password: str = Field(min_length=6)

class LoginIn(BaseModel):
    email: EmailStr
    password: str

class UserMeOut(BaseModel):
    id: int
    email: Optional[EmailStr] = None
    name: Optional[str] = None
    created_at: Optional[datetime] = None
    last_login: Optional[datetime] = None

    class Config:
        from_attributes = True

# ---------- Deals ----------
class DealCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)

class DealRename(BaseModel):
    name: str

class DealOut(BaseModel):
    id: int
    name: str
    user_id: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
        frozen = True

class DealWithCountOut(DealOut):
    transcript_count: int = 0

# ---------- Transcripts ----------
class TranscriptOut(BaseModel):
    id: int
    deal_id: int
    file_name: str
    content: str
    call_date: Optional[date] = None
    call_time: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
        frozen = True

# ---------- Contacts ----------
class ContactToDealIn(BaseModel):
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    email: EmailStr
    job_title: Optional[str] = None
    role_in_deal: Optional[str] = None

class ContactWithRole(BaseModel):
    id: int
    first_name: str
    last_name: str
    email: Optional[str] = None
    job_title: Optional[str] = None
    role_in_deal: Optional[str] = None  # from the deal association, not the contact

    class Config:
        from_attributes = True
        frozen = True

class ContactLinkOut(BaseModel):
    contact_id: int
    deal_id: int
    role_in_deal: Optional[str] = None

# ---------- Action items ----------
class ActionItemCreate(BaseModel):
    description: str = Field(min_length=1)
    transcript_id: Optional[int] = None

class ActionItemUpdate(BaseModel):
    description: Optional[str] = None
    is_completed: Optional[bool] = None

class ActionItemOut(BaseModel):
    id: int
    deal_id: int
    transcript_id: Optional[int] = None
    description: str
    is_completed: bool = False
    is_ai_suggested: bool = False
    user_id: int

    class Config:
        from_attributes = True
        frozen = True

# ---------- AI tasks ----------
# AI endpoints never raise on task failure; they report success + message.
class ActionItemScanOut(BaseModel):
    success: bool
    new_items: List[ActionItemOut] = Field(default_factory=list)
    count: int = 0
    error: Optional[str] = None

class EmailDraftOut(BaseModel):
    success: bool
    email_text: Optional[str] = None
    error: Optional[str] = None

class DealQuestionIn(BaseModel):
    question: str

class DealAnswerOut(BaseModel):
    success: bool
    answer: Optional[str] = None
    error: Optional[str] = None
