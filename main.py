import os
import logging
from contextlib import asynccontextmanager
from typing import Optional, Literal

from fastapi import FastAPI, Depends, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict
from pymongo.database import Database
from pymongo.errors import PyMongoError
import stripe

from config import Config
from database import get_db
from auth import issue_token, verify_token, require_admin, require_member
from payments import PaymentGateway, get_payment_gateway
from schemas import Agreement, Announcement, Coupon, Payment, Review, User
from stores import (
    AgreementWorkflow, AnnouncementStore, ApartmentCatalog, CouponStore,
    PaymentRecorder, ReviewStore, UserDirectory,
)

logging.basicConfig(
    level=Config.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    Config.validate()
    yield


app = FastAPI(title="StayEase API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=Config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PyMongoError)
async def database_error(request, exc):
    logger.error("Database error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.exception_handler(stripe.StripeError)
async def payment_provider_error(request, exc):
    logger.error("Payment provider error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# ------------------------
# Request bodies
# ------------------------
class TokenRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    email: str


class EmailBody(BaseModel):
    email: str


class AgreementDecision(BaseModel):
    id: str
    action: Literal["accept", "reject"]
    apartmentId: str


class CouponCode(BaseModel):
    code: str


class PaymentIntentRequest(BaseModel):
    price: float


@app.get("/")
def root():
    return "Hello From StayEase..."


@app.get("/test")
def test_database(db: Database = Depends(get_db)):
    response = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
        "database_url": "✅ Set" if os.getenv("DATABASE_URL") else "❌ Not Set",
        "database_name": db.name,
        "connection_status": "Not Connected",
        "collections": []
    }
    try:
        response["collections"] = db.list_collection_names()
        response["database"] = "✅ Connected"
        response["connection_status"] = "Connected"
    except PyMongoError as e:
        response["database"] = f"⚠️ {str(e)[:80]}"
    return response

# ------------------------
# Auth & users
# ------------------------
@app.post("/jwt")
def create_token(payload: TokenRequest):
    return {"token": issue_token(payload.model_dump())}


@app.post("/users")
def save_user(payload: User, db: Database = Depends(get_db)):
    return UserDirectory(db).ensure(payload)


@app.get("/users/role/{email}")
def get_role(email: str, db: Database = Depends(get_db), decoded=Depends(verify_token)):
    return UserDirectory(db).role_of(email)


@app.get("/members")
def list_members(db: Database = Depends(get_db), admin=Depends(require_admin)):
    return UserDirectory(db).members()


@app.patch("/remove-members")
def remove_member(payload: EmailBody, db: Database = Depends(get_db), admin=Depends(require_admin)):
    return UserDirectory(db).demote(payload.email)

# ------------------------
# Apartments
# ------------------------
@app.get("/apartments")
def list_apartments(
    page: Optional[int] = Query(None, ge=0),
    size: Optional[int] = Query(None, ge=1, le=100),
    db: Database = Depends(get_db),
):
    return ApartmentCatalog(db).list(page, size)


@app.get("/apartments-count")
def count_apartments(db: Database = Depends(get_db)):
    return {"count": ApartmentCatalog(db).count()}


@app.get("/featured-apartments")
def featured_apartments(db: Database = Depends(get_db)):
    return ApartmentCatalog(db).list_featured()


@app.get("/apartments-price")
def apartments_by_price(
    minPrice: Optional[float] = None,
    maxPrice: Optional[float] = None,
    db: Database = Depends(get_db),
):
    return ApartmentCatalog(db).search(minPrice, maxPrice)


@app.get("/admin-stats")
def admin_stats(db: Database = Depends(get_db), admin=Depends(require_admin)):
    return ApartmentCatalog(db).stats()

# ------------------------
# Agreements
# ------------------------
@app.post("/agreements")
def submit_agreement(payload: Agreement, db: Database = Depends(get_db), decoded=Depends(verify_token)):
    return AgreementWorkflow(db).submit(payload)


@app.get("/agreements")
def pending_agreements(db: Database = Depends(get_db), admin=Depends(require_admin)):
    return AgreementWorkflow(db).list_pending()


@app.post("/manage-agreement-request")
def manage_agreement(payload: AgreementDecision, db: Database = Depends(get_db), admin=Depends(require_admin)):
    return AgreementWorkflow(db).resolve(payload.id, payload.action, payload.apartmentId)


@app.post("/repair-agreements")
def repair_agreements(db: Database = Depends(get_db), admin=Depends(require_admin)):
    return {"repaired": AgreementWorkflow(db).repair()}


@app.get("/agreement/{email}")
def member_agreement(email: str, db: Database = Depends(get_db), member=Depends(require_member)):
    return AgreementWorkflow(db).find_for(email)

# ------------------------
# Announcements
# ------------------------
@app.post("/announcements")
def create_announcement(payload: Announcement, db: Database = Depends(get_db), admin=Depends(require_admin)):
    return AnnouncementStore(db).create(payload)


@app.get("/announcements")
def list_announcements(db: Database = Depends(get_db)):
    return AnnouncementStore(db).list()

# ------------------------
# Coupons
# ------------------------
@app.post("/coupons")
def create_coupon(payload: Coupon, db: Database = Depends(get_db), admin=Depends(require_admin)):
    return CouponStore(db).create(payload)


@app.get("/all-coupons")
def list_coupons(db: Database = Depends(get_db)):
    return CouponStore(db).list()


@app.get("/delete-coupon/{coupon_id}")
def delete_coupon(coupon_id: str, db: Database = Depends(get_db), admin=Depends(require_admin)):
    return CouponStore(db).delete(coupon_id)


@app.post("/validate-coupons")
def validate_coupon(payload: CouponCode, db: Database = Depends(get_db), member=Depends(require_member)):
    return CouponStore(db).validate(payload.code)

# ------------------------
# Payments
# ------------------------
@app.post("/create-payment-intent")
def create_payment_intent(
    payload: PaymentIntentRequest,
    gateway: PaymentGateway = Depends(get_payment_gateway),
    member=Depends(require_member),
):
    return {"clientSecret": gateway.create_intent(payload.price)}


@app.post("/payments")
def record_payment(payload: Payment, db: Database = Depends(get_db), member=Depends(require_member)):
    return PaymentRecorder(db).record(payload)


@app.get("/payment-history/{email}")
def payment_history(email: str, db: Database = Depends(get_db), member=Depends(require_member)):
    return PaymentRecorder(db).history_for(email)

# ------------------------
# Reviews
# ------------------------
@app.get("/reviews")
def list_reviews(db: Database = Depends(get_db)):
    return ReviewStore(db).list()


@app.post("/reviews")
def create_review(payload: Review, db: Database = Depends(get_db), decoded=Depends(verify_token)):
    return ReviewStore(db).create(payload)


if __name__ == "__main__":
    import uvicorn
    Config.validate()
    uvicorn.run(app, host="0.0.0.0", port=Config.PORT)
