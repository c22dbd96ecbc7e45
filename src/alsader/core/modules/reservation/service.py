from typing import Any
from uuid import UUID

import structlog
from pymongo import ReturnDocument
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import DuplicateKeyError

from alsader.core.core import Service
from alsader.core.modules.reference.models import DocumentType, ReferenceId
from alsader.core.modules.reference.validators import format_reference, parse_reference_id
from alsader.core.modules.reservation.models import Reservation
from alsader.core.modules.user.models import User
from alsader.errors import ConflictError, NotFoundError
from alsader.utils import now

logger = structlog.get_logger(__name__)


class ReservationService(Service):
    """Manages manual pre-claims on reference numbers."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("reservations")
        self._positions = database.get_collection("reservation_positions")

    async def on_start(self) -> None:
        """Create indexes; at most one active reservation per reference is enforced by the database."""
        await self._collection.create_index(
            [("document_type", 1), ("reference_id", 1)],
            unique=True,
            partialFilterExpression={"is_used": False},
            name="active_reference_unique",
        )
        await self._collection.create_index([("is_used", 1), ("position", 1)])

    async def reserve(self, document_type: DocumentType, raw_reference_id: str, notes: str, user: User) -> Reservation:
        """Reserve a reference number for later use.

        Raises:
            InvalidFormatError: If the reference is not a positive decimal number
            ConflictError: If a document holds the number or it is already reserved
        """
        reference_id = parse_reference_id(raw_reference_id)
        reference = format_reference(document_type, reference_id)
        if await self.core.services.document.reference_exists(document_type, reference_id):
            raise ConflictError(f"Reference {reference} is already used by a document")

        reservation = Reservation(
            document_type=document_type,
            reference_id=reference_id,
            notes=notes,
            reserved_by=user.id,
            position=await self._next_position(),
        )
        try:
            await self._collection.insert_one(reservation.to_mongo())
        except DuplicateKeyError as e:
            raise ConflictError(f"Reference {reference} is already reserved") from e

        # A document may have claimed the number between the check and the insert
        if await self.core.services.document.reference_exists(document_type, reference_id):
            await self._collection.delete_one({"_id": reservation.id, "is_used": False})
            raise ConflictError(f"Reference {reference} is already used by a document")

        await self.core.services.counter.advance_past(document_type, reference_id)
        logger.info("reservation_created", document_type=document_type, reference_id=reference_id, reserved_by=user.username)
        return reservation

    async def get_reservation(self, reservation_id: UUID) -> Reservation:
        doc = await self._collection.find_one({"_id": reservation_id})
        if doc is None:
            raise NotFoundError(f"Reservation not found: {reservation_id}")
        return Reservation.model_validate(doc)

    async def find_active(self, document_type: DocumentType, reference_id: ReferenceId) -> Reservation | None:
        doc = await self._collection.find_one(
            {"document_type": document_type, "reference_id": int(reference_id), "is_used": False}
        )
        return Reservation.from_mongo(doc)

    async def active_reference_ids_from(self, document_type: DocumentType, start: int) -> list[int]:
        return await self._collection.distinct(
            "reference_id", {"document_type": document_type, "reference_id": {"$gte": start}, "is_used": False}
        )

    async def list_active(self, document_type: DocumentType | None = None) -> list[Reservation]:
        """Unused reservations in the order they were made."""
        query: dict[str, Any] = {"is_used": False}
        if document_type is not None:
            query["document_type"] = document_type
        cursor = self._collection.find(query).sort([("position", 1), ("reserved_at", 1)])
        return await Reservation.list_cursor(cursor)

    async def list_all(self, document_type: DocumentType | None = None) -> list[Reservation]:
        """Every reservation, used ones included, in the order they were made."""
        query: dict[str, Any] = {}
        if document_type is not None:
            query["document_type"] = document_type
        cursor = self._collection.find(query).sort([("position", 1), ("reserved_at", 1)])
        return await Reservation.list_cursor(cursor)

    async def mark_used(self, document_type: DocumentType, reference_id: ReferenceId, document_id: str) -> Reservation | None:
        """Bind the active reservation for this reference, if any, to the document that consumed it."""
        doc = await self._collection.find_one_and_update(
            {"document_type": document_type, "reference_id": int(reference_id), "is_used": False},
            {"$set": {"is_used": True, "used_at": now(), "used_document_id": document_id}},
            return_document=ReturnDocument.AFTER,
        )
        if doc is None:
            return None
        logger.info("reservation_used", document_type=document_type, reference_id=reference_id, document_id=document_id)
        return Reservation.model_validate(doc)

    async def cancel_reservation(self, reservation_id: UUID, user: User) -> None:
        """Release an unused reservation (owner or admin)."""
        reservation = await self.get_reservation(reservation_id)
        reference = format_reference(reservation.document_type, reservation.reference_id)
        if reservation.is_used:
            raise ConflictError(f"Reservation for {reference} was already used")
        self.core.services.access.ensure_owner_or_admin(user, reservation.reserved_by, f"reservation for {reference}")

        result = await self._collection.delete_one({"_id": reservation_id, "is_used": False})
        if result.deleted_count == 0:
            raise ConflictError(f"Reservation for {reference} was already used")
        logger.info("reservation_cancelled", reservation_id=reservation_id, cancelled_by=user.username)

    async def reset_reservations(self, document_type: DocumentType) -> int:
        """Delete every reservation of a type and return how many were removed."""
        result = await self._collection.delete_many({"document_type": document_type})
        logger.info("reservations_reset", document_type=document_type, count=result.deleted_count)
        return result.deleted_count

    async def _next_position(self) -> int:
        """Atomically increment the insertion counter shared by all reservations."""
        result = await self._positions.find_one_and_update(
            {"_id": "reservations"},
            {"$inc": {"seq": 1}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return int(result["seq"])
