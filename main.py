import io
import logging
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from openpyxl import Workbook
from pydantic import BaseModel, EmailStr, Field
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

import ledger
from analytics import EXPORT_COLUMNS, compute_dashboard, export_rows
from auth import Principal, authenticate, create_access_token, current_principal, hash_password, require_admin
from config import settings
import database
from database import create_document, get_db, get_documents, oid, utcnow
from errors import StoreError
from schemas import DashboardStats, GalleryImage, OrderItem, OrderRecord, OrderStatus, Product, Review, Role, User
from seed import HERO_IMAGE_KEY, bootstrap, put_setting

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

app = FastAPI(title="NIORA Storefront API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StoreError)
def store_error_handler(request: Request, exc: StoreError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.exception_handler(RequestValidationError)
def request_validation_handler(request: Request, exc: RequestValidationError):
    # offending values are not echoed back; they may not be JSON-encodable
    errors = [{k: v for k, v in e.items() if k not in ("input", "ctx")} for e in exc.errors()]
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(errors)})


class SignupPayload(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=1)


class LoginPayload(BaseModel):
    email: EmailStr
    password: str


class CheckoutPayload(BaseModel):
    items: List[OrderItem]
    total: float = Field(..., allow_inf_nan=False)
    address: str
    contact: str
    user_id: Optional[str] = None


class StatusPayload(BaseModel):
    status: OrderStatus


class HeroPayload(BaseModel):
    image: str = Field(..., min_length=1)


@app.get("/")
def read_root():
    return {"message": "NIORA Storefront Backend running"}


@app.get("/test")
def test_database():
    response = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
        "database_url": "✅ Set" if settings.database_url else "❌ Not Set",
        "database_name": "✅ Set" if settings.database_name else "❌ Not Set",
        "connection_status": "Not Connected",
        "collections": [],
    }
    if database.db is None:
        return response
    try:
        response["collections"] = database.db.list_collection_names()[:10]
        response["database"] = "✅ Connected & Working"
        response["connection_status"] = "Connected"
    except Exception as e:
        logger.warning("Database check failed: %s", e)
        response["database"] = f"⚠️ Connected but Error: {str(e)[:50]}"
    return response


# Auth endpoints
@app.post("/api/auth/signup")
def signup(payload: SignupPayload, db: Database = Depends(get_db)):
    user = User(
        name=payload.name,
        email=payload.email,
        password_hash=hash_password(payload.password),
        role=Role.customer,
    )
    try:
        user_id = create_document(db, "user", user)
    except DuplicateKeyError:
        raise HTTPException(status_code=400, detail="Email already registered")
    return {"message": "Signup successful", "user_id": user_id}


@app.post("/api/auth/login")
def login(payload: LoginPayload, db: Database = Depends(get_db)):
    user = authenticate(db, payload.email, payload.password)
    user_id = str(user["_id"])
    role = Role(user.get("role", Role.customer.value))
    token = create_access_token(user_id, user.get("name", ""), role)
    return {"token": token, "user": {"id": user_id, "name": user.get("name"), "role": role.value}}


@app.get("/api/me")
def me(principal: Principal = Depends(current_principal)):
    return principal


# Product endpoints
@app.get("/api/products")
def list_products(db: Database = Depends(get_db)):
    return get_documents(db, "product")


@app.post("/api/products")
def create_product(payload: Product, admin: Principal = Depends(require_admin), db: Database = Depends(get_db)):
    product_id = create_document(db, "product", payload)
    return {"id": product_id}


@app.put("/api/products/{product_id}")
def update_product(product_id: str, payload: Product, admin: Principal = Depends(require_admin),
                   db: Database = Depends(get_db)):
    update = payload.model_dump()
    update["updated_at"] = utcnow()
    res = db["product"].update_one({"_id": oid(product_id)}, {"$set": update})
    if res.matched_count == 0:
        raise HTTPException(status_code=404, detail="Product not found")
    return {"success": True}


@app.delete("/api/products/{product_id}")
def delete_product(product_id: str, admin: Principal = Depends(require_admin), db: Database = Depends(get_db)):
    res = db["product"].delete_one({"_id": oid(product_id)})
    if res.deleted_count == 0:
        raise HTTPException(status_code=404, detail="Product not found")
    return {"success": True}


# Orders
@app.post("/api/orders")
def create_order(payload: CheckoutPayload, db: Database = Depends(get_db)):
    order_id = ledger.place_order(
        db,
        payload.items,
        payload.total,
        payload.address,
        payload.contact,
        user_id=payload.user_id,
    )
    return {"id": order_id}


@app.get("/api/admin/orders", response_model=List[OrderRecord])
def list_orders(month: Optional[str] = None, admin: Principal = Depends(require_admin),
                db: Database = Depends(get_db)):
    return ledger.list_orders(db, month)


@app.get("/api/admin/orders/export")
def export_orders(admin: Principal = Depends(require_admin), db: Database = Depends(get_db)):
    wb = Workbook()
    ws = wb.active
    ws.title = "Orders"
    ws.append(EXPORT_COLUMNS)
    for row in export_rows(ledger.load_orders(db)):
        ws.append([row[c] for c in EXPORT_COLUMNS])
    buf = io.BytesIO()
    wb.save(buf)
    return Response(
        content=buf.getvalue(),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": 'attachment; filename="NIORA_Orders.xlsx"'},
    )


@app.patch("/api/admin/orders/{order_id}/status", response_model=OrderRecord)
def update_order_status(order_id: str, payload: StatusPayload, admin: Principal = Depends(require_admin),
                        db: Database = Depends(get_db)):
    return ledger.update_status(db, order_id, payload.status)


@app.get("/api/admin/stats", response_model=DashboardStats)
def dashboard_stats(month: Optional[str] = None, admin: Principal = Depends(require_admin),
                    db: Database = Depends(get_db)):
    return compute_dashboard(ledger.load_orders(db), month)


# Reviews
@app.get("/api/reviews")
def list_reviews(db: Database = Depends(get_db)):
    return get_documents(db, "review", newest_first=True)


@app.post("/api/reviews")
def create_review(payload: Review, db: Database = Depends(get_db)):
    review_id = create_document(db, "review", payload)
    return {"success": True, "id": review_id}


# Gallery
@app.get("/api/gallery")
def list_gallery(db: Database = Depends(get_db)):
    return get_documents(db, "gallery", newest_first=True)


@app.post("/api/gallery")
def add_gallery_image(payload: GalleryImage, admin: Principal = Depends(require_admin),
                      db: Database = Depends(get_db)):
    image_id = create_document(db, "gallery", payload)
    return {"id": image_id, "image": payload.image}


@app.delete("/api/gallery/{image_id}")
def delete_gallery_image(image_id: str, admin: Principal = Depends(require_admin), db: Database = Depends(get_db)):
    res = db["gallery"].delete_one({"_id": oid(image_id)})
    if res.deleted_count == 0:
        raise HTTPException(status_code=404, detail="Image not found")
    return {"success": True}


# Settings
@app.get("/api/settings")
def get_settings(db: Database = Depends(get_db)):
    return {doc["key"]: doc["value"] for doc in db["setting"].find({})}


@app.post("/api/settings/hero")
def set_hero_image(payload: HeroPayload, admin: Principal = Depends(require_admin), db: Database = Depends(get_db)):
    put_setting(db, HERO_IMAGE_KEY, payload.image)
    return {"success": True, "image": payload.image}


@app.on_event("startup")
def run_bootstrap():
    if database.db is None:
        logger.warning("DATABASE_URL / DATABASE_NAME not set; skipping bootstrap")
        return
    bootstrap(database.db)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
