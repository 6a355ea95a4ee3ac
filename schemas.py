"""
Database Schemas

Define your MongoDB collection schemas here using Pydantic models.
These schemas are used for data validation in your application.

Each Pydantic model represents a collection in your database.
Model name is converted to lowercase for the collection name:
- User -> "user" collection
- Product -> "product" collection
- Order -> "order" collection
- Review -> "review" collection
- GalleryImage -> "gallery" collection
- Setting -> "setting" collection

The remaining models are read-side shapes used by the order ledger and the
dashboard.
"""

from datetime import datetime
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, EmailStr, Field


class Role(str, Enum):
    customer = "customer"
    admin = "admin"


class OrderStatus(str, Enum):
    pending = "pending"
    delivered = "delivered"


class User(BaseModel):
    """
    Users collection schema
    Collection name: "user" (lowercase of class name)
    """
    name: str = Field(..., description="Full name")
    email: EmailStr = Field(..., description="Email address")
    password_hash: str = Field(..., description="BCrypt password hash")
    role: Role = Field(Role.customer, description="customer or admin")


class Product(BaseModel):
    """
    Products collection schema
    Collection name: "product" (lowercase of class name)
    """
    name: str = Field(..., min_length=1, description="Product name")
    price: float = Field(..., ge=0, allow_inf_nan=False, description="Unit price")
    description: Optional[str] = Field(None, description="Product description")
    benefits: Optional[str] = Field(None, description="Comma-joined benefit phrases")
    image: Optional[str] = Field(None, description="Image URL or path")


class OrderItem(BaseModel):
    """One line of the frozen cart snapshot stored on an order."""
    name: str = Field(..., min_length=1)
    price: float = Field(..., ge=0, allow_inf_nan=False)
    quantity: int = Field(..., ge=1)


class Order(BaseModel):
    """
    Orders collection schema
    Collection name: "order" (lowercase of class name)
    """
    user_id: Optional[str] = Field(None, description="User placing the order")
    items: str = Field(..., description="JSON snapshot of the ordered items")
    total: float = Field(..., ge=0, allow_inf_nan=False)
    status: OrderStatus = Field(OrderStatus.pending, description="Order status")
    address: str
    contact: str


class Review(BaseModel):
    """
    Reviews collection schema
    Collection name: "review" (lowercase of class name)
    """
    product_id: Optional[str] = None
    user_name: str = Field(..., min_length=1)
    comment: str
    rating: int = Field(5, ge=1, le=5)


class GalleryImage(BaseModel):
    """
    Gallery collection schema
    Collection name: "gallery"
    """
    image: str = Field(..., min_length=1, description="Image URL or path")


class Setting(BaseModel):
    """
    Settings collection schema
    Collection name: "setting" (lowercase of class name)
    """
    key: str
    value: str


class OrderRecord(BaseModel):
    """An order as read back from the ledger.

    `status` and `items` are taken as stored: rows written by hand or by
    older code may hold anything there.
    """
    id: str
    user_id: Optional[str] = None
    items: Any = None
    total: float
    status: Optional[str] = OrderStatus.pending.value
    address: str = ""
    contact: str = ""
    created_at: datetime


class MonthlySales(BaseModel):
    month: str
    sales: float


class StatusCount(BaseModel):
    name: str
    value: int


class ProductSales(BaseModel):
    name: str
    quantity: int


class DashboardStats(BaseModel):
    total_orders: int
    total_revenue: float
    delivered: int
    pending: int
    best_seller: str
    sales_by_month: List[MonthlySales]
    status_breakdown: List[StatusCount]
    product_sales: List[ProductSales]
