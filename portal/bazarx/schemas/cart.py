"""
Cart and Wishlist Schemas
"""
from typing import List

from pydantic import BaseModel, Field


class CartItemIn(BaseModel):
    productId: str = Field(..., min_length=1)
    name: str = ""
    price: float = Field(0, ge=0)
    quantity: int = 1
    image: str = ""


class QuantityUpdate(BaseModel):
    quantity: int


class CartItemOut(BaseModel):
    productId: str
    name: str
    price: float
    quantity: int
    image: str
    subtotal: str


class CartView(BaseModel):
    items: List[CartItemOut]
    count: int
    total: float
    formatted_total: str


class WishlistItemIn(BaseModel):
    productId: str = Field(..., min_length=1)
    name: str = ""
    price: float = Field(0, ge=0)
    image: str = ""


class WishlistView(BaseModel):
    items: List[WishlistItemIn]
    productIds: List[str]
