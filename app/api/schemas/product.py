from typing import Optional
from pydantic import BaseModel, Field


class ProductCreate(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = ""
    price: float = Field(..., gt=0)
    image_url: Optional[str] = None


class ProductOut(BaseModel):
    id: str
    title: str
    description: Optional[str] = ""
    price: float
    image_url: Optional[str] = None
    has_file: bool = False
    created_at: Optional[str] = None


class DownloadLink(BaseModel):
    url: str
    expires_in: int
