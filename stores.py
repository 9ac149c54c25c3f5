"""
Collection-level operations behind the StayEase routes.

Every store takes the database handle in its constructor; none of them keep
state of their own between calls.
"""
import logging
from typing import Any, Dict, List, Optional

from fastapi import HTTPException
from pymongo.database import Database

from database import (
    AGREEMENT_INTENTS, AGREEMENTS, ANNOUNCEMENTS, APARTMENTS, COUPONS, PAYMENTS, REVIEWS, USERS,
    create_document, deleted, get_documents, inserted, now_utc, serialize, to_object_id, updated,
)
from schemas import Agreement, Announcement, Coupon, Payment, Review, User

logger = logging.getLogger(__name__)

FEATURED_LIMIT = 6
ACTIVE_AGREEMENT_MESSAGE = "You already have an active agreement"
INVALID_COUPON_MESSAGE = "Invalid Coupon"


class UserDirectory:
    def __init__(self, db: Database):
        self.users = db[USERS]

    def find(self, email: Optional[str]) -> Optional[Dict[str, Any]]:
        if not email:
            return None
        return self.users.find_one({"email": email})

    def ensure(self, user: User) -> Dict[str, Any]:
        """Insert the user on first sign-in; existing records are left alone"""
        if self.find(user.email):
            return {"message": "user already exists", "insertedId": None}
        data = user.model_dump()
        data["role"] = "user"
        return inserted(create_document(self.users, data))

    def role_of(self, email: str) -> Dict[str, Any]:
        doc = self.find(email)
        return {"role": doc.get("role") if doc else None}

    def members(self) -> List[Dict[str, Any]]:
        return get_documents(self.users, {"role": "member"})

    def set_role(self, email: str, role: str) -> Dict[str, Any]:
        res = self.users.update_one({"email": email}, {"$set": {"role": role}})
        logger.info("Role of %s set to %s (matched=%s)", email, role, res.matched_count)
        return updated(res)

    def demote(self, email: str) -> Dict[str, Any]:
        return self.set_role(email, "user")


class ApartmentCatalog:
    def __init__(self, db: Database):
        self.apartments = db[APARTMENTS]
        self.users = db[USERS]

    def list(self, page: Optional[int] = None, size: Optional[int] = None) -> List[Dict[str, Any]]:
        if page is None or size is None:
            return get_documents(self.apartments)
        return get_documents(self.apartments, skip=max(0, page) * size, limit=size)

    def count(self) -> int:
        return self.apartments.count_documents({})

    def list_featured(self) -> List[Dict[str, Any]]:
        return get_documents(self.apartments, sort=[("rent", -1)], limit=FEATURED_LIMIT)

    def search(self, min_price: Optional[float] = None, max_price: Optional[float] = None):
        filt: Dict[str, Any] = {}
        if min_price is not None or max_price is not None:
            price_cond: Dict[str, Any] = {}
            if min_price is not None:
                price_cond["$gte"] = min_price
            if max_price is not None:
                price_cond["$lte"] = max_price
            filt["rent"] = price_cond
        return get_documents(self.apartments, filt, sort=[("rent", 1)])

    def set_status(self, apartment_id: str, status: str) -> Dict[str, Any]:
        res = self.apartments.update_one({"_id": to_object_id(apartment_id)}, {"$set": {"status": status}})
        return updated(res)

    def stats(self) -> Dict[str, int]:
        return {
            "totalRoom": self.apartments.count_documents({}),
            "availableRoom": self.apartments.count_documents({"status": "available"}),
            "totalUser": self.users.count_documents({"role": "user"}),
            "totalMember": self.users.count_documents({"role": "member"}),
        }


class AgreementWorkflow:
    """Pending -> Checked transitions for rental agreements.

    Accepting an agreement touches two collections (apartment status, user
    role). Those writes are not transactional, so each acceptance is
    recorded in the intent log first and `repair` can finish any acceptance
    that stopped halfway.
    """

    def __init__(self, db: Database):
        self.agreements = db[AGREEMENTS]
        self.intents = db[AGREEMENT_INTENTS]
        self.catalog = ApartmentCatalog(db)
        self.directory = UserDirectory(db)

    def submit(self, agreement: Agreement) -> Dict[str, Any]:
        # Any previous agreement blocks a new one, whatever its status.
        if self.agreements.find_one({"email": agreement.email}):
            logger.info("Agreement request from %s refused: one already exists", agreement.email)
            return {"message": ACTIVE_AGREEMENT_MESSAGE}
        data = agreement.model_dump()
        data["status"] = "Pending"
        data["acceptDate"] = None
        new_id = create_document(self.agreements, data)
        logger.info("Agreement %s submitted by %s", new_id, agreement.email)
        return inserted(new_id)

    def list_pending(self) -> List[Dict[str, Any]]:
        items = []
        for doc in self.agreements.find({"status": "Pending"}):
            doc["requestDate"] = doc["_id"].generation_time
            items.append(serialize(doc))
        return items

    def find_for(self, email: str) -> Optional[Dict[str, Any]]:
        return serialize(self.agreements.find_one({"email": email}))

    def resolve(self, agreement_id: str, action: str, apartment_id: str) -> Dict[str, Any]:
        agreement = self.agreements.find_one({"_id": to_object_id(agreement_id)})
        if not agreement:
            raise HTTPException(status_code=404, detail="Agreement not found")
        if agreement.get("status") != "Pending":
            raise HTTPException(status_code=409, detail="Agreement already checked")
        email = agreement["email"]

        # acceptDate is stamped on rejection too.
        self.agreements.update_one(
            {"_id": agreement["_id"]},
            {"$set": {"status": "Checked", "acceptDate": now_utc()}},
        )
        if action != "accept":
            logger.info("Agreement %s rejected", agreement_id)
            return {"message": "Agreement rejected"}

        intent_id = self.intents.insert_one({
            "agreementId": agreement_id,
            "apartmentId": apartment_id,
            "email": email,
            "state": "started",
            "createdAt": now_utc(),
        }).inserted_id
        result = self._apply(apartment_id, email)
        self.intents.update_one({"_id": intent_id}, {"$set": {"state": "completed", "completedAt": now_utc()}})
        logger.info("Agreement %s accepted; %s is now a member", agreement_id, email)
        return result

    def repair(self) -> int:
        """Finish acceptances whose intent never reached `completed`"""
        repaired = 0
        for intent in self.intents.find({"state": "started"}):
            self._apply(intent["apartmentId"], intent["email"])
            self.intents.update_one({"_id": intent["_id"]}, {"$set": {"state": "completed", "completedAt": now_utc()}})
            logger.warning("Repaired acceptance of agreement %s", intent["agreementId"])
            repaired += 1
        return repaired

    def _apply(self, apartment_id: str, email: str) -> Dict[str, Any]:
        self.catalog.set_status(apartment_id, "unavailable")
        return self.directory.set_role(email, "member")


class CouponStore:
    def __init__(self, db: Database):
        self.coupons = db[COUPONS]

    def create(self, coupon: Coupon) -> Dict[str, Any]:
        return inserted(create_document(self.coupons, coupon))

    def list(self) -> List[Dict[str, Any]]:
        return get_documents(self.coupons)

    def delete(self, coupon_id: str) -> Dict[str, Any]:
        return deleted(self.coupons.delete_one({"_id": to_object_id(coupon_id)}))

    def validate(self, code: str) -> Dict[str, Any]:
        doc = self.coupons.find_one({"code": code})
        if not doc:
            return {"message": INVALID_COUPON_MESSAGE}
        return serialize(doc)


class AnnouncementStore:
    def __init__(self, db: Database):
        self.announcements = db[ANNOUNCEMENTS]

    def create(self, announcement: Announcement) -> Dict[str, Any]:
        return inserted(create_document(self.announcements, announcement))

    def list(self) -> List[Dict[str, Any]]:
        return get_documents(self.announcements, sort=[("_id", -1)])


class ReviewStore:
    def __init__(self, db: Database):
        self.reviews = db[REVIEWS]

    def create(self, review: Review) -> Dict[str, Any]:
        return inserted(create_document(self.reviews, review))

    def list(self) -> List[Dict[str, Any]]:
        return get_documents(self.reviews)


class PaymentRecorder:
    def __init__(self, db: Database):
        self.payments = db[PAYMENTS]

    def record(self, payment: Payment) -> Dict[str, Any]:
        data = payment.model_dump()
        if data.get("date") is None:
            data["date"] = now_utc()
        new_id = create_document(self.payments, data)
        logger.info("Payment %s recorded for %s", new_id, payment.email)
        return inserted(new_id)

    def history_for(self, email: str) -> List[Dict[str, Any]]:
        return get_documents(self.payments, {"email": email})
