"""
Database Schemas for StayEase

Each Pydantic model describes a document in one MongoDB collection. Field
names stay camelCase because the web client reads the documents as-is.
"""

from typing import Optional, Literal, Dict, Any
from pydantic import BaseModel, Field
from datetime import datetime

Role = Literal["user", "member", "admin"]
AgreementStatus = Literal["Pending", "Checked"]

class User(BaseModel):
    email: str
    name: Optional[str] = None
    photo: Optional[str] = None
    role: Role = Field("user", description="user, member or admin")

class Agreement(BaseModel):
    email: str
    name: Optional[str] = None
    apartmentId: str = Field(..., description="Apartment _id as string")
    apartmentNo: Optional[str] = None
    floorNo: Optional[int] = None
    blockName: Optional[str] = None
    rent: Optional[float] = None
    status: AgreementStatus = "Pending"
    acceptDate: Optional[datetime] = None

class Coupon(BaseModel):
    code: str
    discount: float
    description: Optional[str] = None

class Announcement(BaseModel):
    title: str
    description: str

class Payment(BaseModel):
    email: str
    price: float
    month: Optional[str] = None
    transactionId: Optional[str] = None
    date: Optional[datetime] = None
    metadata: Dict[str, Any] = {}

class Review(BaseModel):
    name: str
    image: Optional[str] = None
    rating: int = Field(..., ge=1, le=5)
    review: str
