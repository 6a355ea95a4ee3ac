import logging

from pymongo.database import Database

from auth import hash_password
from config import settings
from database import create_document, ensure_indexes
from schemas import GalleryImage, Product, Role, User

logger = logging.getLogger(__name__)

SEEDED_KEY = "seeded"
HERO_IMAGE_KEY = "hero_image"

SAMPLE_PRODUCTS = [
    {
        "name": "NIORA RED WINE SOAP",
        "price": 79,
        "description": "Luxury care. Youthful glow. Infused with red wine-inspired antioxidant care, this soap helps support smoother, fresher-looking skin while maintaining a soft and radiant finish.",
        "benefits": "Rich in antioxidant-inspired care,Helps reduce appearance of fine lines,Keeps skin soft & hydrated,Promotes radiant, youthful glow,Gentle for daily cleansing",
        "image": "https://images.unsplash.com/photo-1606813902914-cb5e3a6a7d26",
    },
    {
        "name": "NIORA SHUDDHA GLOW",
        "price": 89,
        "description": "Sun tan removal. Natural glow restoration. Specially crafted to help reduce tanning caused by sun exposure while restoring your skin's natural brightness.",
        "benefits": "Helps reduce tan appearance,Enhances natural glow,Removes dirt & impurities,Keeps skin soft & smooth,Suitable for regular use",
        "image": "https://images.unsplash.com/photo-1585386959984-a4155224a1ad",
    },
    {
        "name": "NIORA CHARCOAL SOAP",
        "price": 89,
        "description": "Deep detox. Clear confidence. Infused with charcoal to deeply cleanse pores and remove excess oil for clearer-looking skin.",
        "benefits": "Draws out dirt & impurities,Helps unclog pores,Reduces excess oil,Promotes clearer skin look,Ideal for oily & acne-prone skin",
        "image": "https://images.unsplash.com/photo-1585386959984-a4155224a1ad",
    },
    {
        "name": "NIORA SIGNATURE SOAP",
        "price": 200,
        "description": "Intensive care. Visible nourishment. A rich, concentrated formula crafted with premium skin-loving ingredients to deeply cleanse, nourish, and restore skin vitality.",
        "benefits": "Deeply nourishes & revitalizes skin,Enhances skin texture & smoothness,Supports healthy moisture balance,Promotes firmer, radiant-looking skin,Ideal as a weekly treatment bar (2-3x use)",
        "image": "https://images.unsplash.com/photo-1604908177522-4028c0f9b0db",
    },
]

SAMPLE_GALLERY = [
    "https://picsum.photos/seed/niora1/400/600",
    "https://picsum.photos/seed/niora2/400/600",
    "https://picsum.photos/seed/niora3/400/600",
    "https://picsum.photos/seed/niora4/400/600",
]


def get_setting(db: Database, key: str):
    doc = db["setting"].find_one({"key": key})
    return doc["value"] if doc else None


def put_setting(db: Database, key: str, value: str) -> None:
    db["setting"].update_one({"key": key}, {"$set": {"key": key, "value": value}}, upsert=True)


def ensure_admin(db: Database) -> None:
    if db["user"].count_documents({"role": Role.admin.value}) > 0:
        return
    if db["user"].find_one({"email": settings.admin_email}):
        logger.warning("Admin email %s belongs to an existing non-admin user; not creating admin", settings.admin_email)
        return
    admin = User(
        name=settings.admin_name,
        email=settings.admin_email,
        password_hash=hash_password(settings.admin_password),
        role=Role.admin,
    )
    create_document(db, "user", admin)
    logger.info("Created admin user %s", settings.admin_email)


def bootstrap(db: Database) -> None:
    ensure_indexes(db)

    if get_setting(db, HERO_IMAGE_KEY) is None:
        put_setting(db, HERO_IMAGE_KEY, settings.hero_image)

    # samples go in once; the marker keeps admin deletions from being undone
    if get_setting(db, SEEDED_KEY) is None:
        if db["product"].count_documents({}) == 0:
            for p in SAMPLE_PRODUCTS:
                create_document(db, "product", Product(**p))
            logger.info("Seeded %d sample products", len(SAMPLE_PRODUCTS))
        if db["gallery"].count_documents({}) == 0:
            for image in SAMPLE_GALLERY:
                create_document(db, "gallery", GalleryImage(image=image))
            logger.info("Seeded %d gallery images", len(SAMPLE_GALLERY))
        put_setting(db, SEEDED_KEY, "true")

    ensure_admin(db)
