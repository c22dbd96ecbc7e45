from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from uuid import UUID

from alsader.config import Config
from alsader.core.core import Core
from alsader.core.modules.admin.models import NewYearResult, ResetDocumentsResult
from alsader.core.modules.audit.models import AuditEntry
from alsader.core.modules.availability.models import AvailabilityView
from alsader.core.modules.counter.models import SequenceView
from alsader.core.modules.document.models import (
    Document,
    DocumentFields,
    DocumentFileInfo,
    DocumentStats,
    DocumentView,
    StatsPeriod,
    UploadedFile,
)
from alsader.core.modules.reference.models import DocumentType
from alsader.core.modules.reference.validators import parse_reference_id
from alsader.core.modules.reservation.models import Reservation, ReservationView
from alsader.core.modules.session.models import AuthToken
from alsader.core.modules.user.models import User, UserRole, UserView
from alsader.core.pagination import PaginationResult
from alsader.errors import AccessDeniedError, AuthenticationError, ValidationError


class App:
    """Facade for all application operations, validates permissions before delegating to Core."""

    def __init__(self, config: Config) -> None:
        self._core = Core(config)

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Application lifespan management - delegates to Core."""
        async with self._core.lifespan():
            yield

    # === Auth & profile ===
    async def is_auth_token_valid(self, auth_token: AuthToken) -> bool:
        return await self._core.services.session.is_auth_token_valid(auth_token)

    async def login(self, username: str, password: str) -> AuthToken:
        """Authenticate user and create session."""
        if not self._core.services.user.verify_password(username, password):
            raise AuthenticationError("Invalid username or password")
        user = self._resolve_user(username)
        return await self._core.services.session.create_session(user.id)

    async def logout(self, auth_token: AuthToken) -> None:
        await self._core.services.access.ensure_authenticated(auth_token)
        await self._core.services.session.invalidate_session(auth_token)

    async def get_current_user(self, auth_token: AuthToken) -> UserView:
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        return UserView.from_domain(current_user)

    async def change_password(self, auth_token: AuthToken, old_password: str, new_password: str) -> None:
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        await self._core.services.user.change_password(current_user.id, old_password, new_password)

    # === Users (admin) ===
    async def get_all_users(self, auth_token: AuthToken) -> list[UserView]:
        await self._core.services.access.ensure_admin(auth_token)
        return [UserView.from_domain(user) for user in self._core.services.user.get_all_users()]

    async def create_user(
        self, auth_token: AuthToken, username: str, password: str, full_name: str, role: UserRole
    ) -> UserView:
        await self._core.services.access.ensure_admin(auth_token)
        user = await self._core.services.user.create_user(username, password, full_name, role)
        return UserView.from_domain(user)

    async def update_user(
        self, auth_token: AuthToken, username: str, full_name: str | None, active: bool | None
    ) -> UserView:
        """Rename or (de)activate a user (admin only, cannot deactivate self)."""
        current_user = await self._core.services.access.ensure_admin(auth_token)
        user = self._resolve_user(username)
        if user.id == current_user.id and active is False:
            raise ValidationError("Cannot deactivate yourself")
        updated = await self._core.services.user.update_user(user.id, full_name, active)
        if not updated.active:
            await self._core.services.session.invalidate_user_sessions(updated.id)
        return UserView.from_domain(updated)

    async def delete_user(self, auth_token: AuthToken, username: str) -> None:
        """Delete a user (admin only, cannot delete self or users who own documents)."""
        current_user = await self._core.services.access.ensure_admin(auth_token)
        user = self._resolve_user(username)
        if user.id == current_user.id:
            raise ValidationError("Cannot delete yourself")
        await self._core.services.user.delete_user(user.id)
        await self._core.services.session.invalidate_user_sessions(user.id)

    # === Reference numbers ===
    async def check_availability(
        self, auth_token: AuthToken, document_type: DocumentType, reference_id: str
    ) -> AvailabilityView:
        await self._core.services.access.ensure_authenticated(auth_token)
        result = await self._core.services.availability.check(document_type, reference_id)
        reservation = self._reservation_view(result.reservation) if result.reservation is not None else None
        return AvailabilityView.from_domain(result, reservation)

    async def reserve_reference(
        self, auth_token: AuthToken, document_type: DocumentType, reference_id: str, notes: str
    ) -> ReservationView:
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        reservation = await self._core.services.reservation.reserve(document_type, reference_id, notes, current_user)
        return self._reservation_view(reservation)

    async def get_reservations(
        self, auth_token: AuthToken, document_type: DocumentType | None = None, active_only: bool = True
    ) -> list[ReservationView]:
        """List reservations; reference numbers are an organization-wide namespace, so everyone sees all of them."""
        await self._core.services.access.ensure_authenticated(auth_token)
        if active_only:
            reservations = await self._core.services.reservation.list_active(document_type)
        else:
            reservations = await self._core.services.reservation.list_all(document_type)
        return [self._reservation_view(reservation) for reservation in reservations]

    async def cancel_reservation(self, auth_token: AuthToken, reservation_id: UUID) -> None:
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        await self._core.services.reservation.cancel_reservation(reservation_id, current_user)

    # === Documents ===
    async def create_document(
        self,
        auth_token: AuthToken,
        document_type: DocumentType,
        fields: DocumentFields,
        manual_reference_id: str | None = None,
        upload: UploadedFile | None = None,
    ) -> DocumentView:
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        document = await self._core.services.document.create_document(
            document_type, fields, current_user, manual_reference_id, upload
        )
        return self._document_view(document)

    async def get_documents(
        self,
        auth_token: AuthToken,
        document_type: DocumentType | None = None,
        search: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> PaginationResult[DocumentView]:
        """Get paginated live documents; admins see all, users their own."""
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        page = await self._core.services.document.list_documents(current_user, document_type, search, limit, offset)
        return page.map_items(self._document_view)

    async def get_document(self, auth_token: AuthToken, document_type: DocumentType, reference_id: str) -> DocumentView:
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        document = await self._core.services.document.get_document_by_raw_reference(document_type, reference_id)
        self._core.services.access.ensure_owner_or_admin(current_user, document.uploaded_by, f"document {document.reference}")
        return self._document_view(document)

    async def delete_document(self, auth_token: AuthToken, document_type: DocumentType, reference_id: str) -> None:
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        await self._core.services.document.soft_delete(document_type, parse_reference_id(reference_id), current_user)

    async def get_document_file_info(
        self, auth_token: AuthToken, document_type: DocumentType, reference_id: str
    ) -> DocumentFileInfo:
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        return await self._core.services.document.get_file_info(document_type, parse_reference_id(reference_id), current_user)

    async def get_document_audit(
        self, auth_token: AuthToken, document_type: DocumentType, reference_id: str
    ) -> list[AuditEntry]:
        """Audit trail of a document, soft-deleted ones included (admin only)."""
        await self._core.services.access.ensure_admin(auth_token)
        document = await self._core.services.document.get_document(
            document_type, parse_reference_id(reference_id), include_deleted=True
        )
        return await self._core.services.audit.list_for_document(document.id)

    async def get_stats(
        self, auth_token: AuthToken, period: StatsPeriod = StatsPeriod.ALL, username: str | None = None
    ) -> DocumentStats:
        """Document statistics; users get their own, admins everyone's or one user's."""
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        owner_id: UUID | None = None
        if username is not None:
            target = self._resolve_user(username)
            if not current_user.is_admin and target.id != current_user.id:
                raise AccessDeniedError("You do not have permission to view other users' statistics")
            owner_id = target.id
        elif not current_user.is_admin:
            owner_id = current_user.id
        return await self._core.services.document.get_stats(owner_id, period)

    # === Administration ===
    async def get_sequences(self, auth_token: AuthToken) -> list[SequenceView]:
        await self._core.services.access.ensure_admin(auth_token)
        return await self._core.services.admin.get_sequences()

    async def start_new_year(
        self, auth_token: AuthToken, document_types: list[DocumentType], clear_reservations: bool
    ) -> NewYearResult:
        await self._core.services.access.ensure_admin(auth_token)
        return await self._core.services.admin.start_new_year(document_types, clear_reservations)

    async def reset_reservations(self, auth_token: AuthToken, document_types: list[DocumentType]) -> dict[DocumentType, int]:
        await self._core.services.access.ensure_admin(auth_token)
        return await self._core.services.admin.reset_reservations(document_types)

    async def reset_documents(
        self, auth_token: AuthToken, document_types: list[DocumentType], archive: bool
    ) -> ResetDocumentsResult:
        await self._core.services.access.ensure_admin(auth_token)
        return await self._core.services.admin.reset_documents(document_types, archive)

    async def is_database_reachable(self) -> bool:
        return await self._core.ping()

    def get_version(self) -> dict[str, str]:
        config = self._core.config
        return {
            "git_commit_hash": config.git_commit_hash,
            "git_commit_date": config.git_commit_date,
            "build_time": config.build_time,
        }

    # === Private helpers ===
    def _resolve_user(self, username: str) -> User:
        """Resolve username to User object. Raises NotFoundError if not found."""
        return self._core.services.user.get_user_by_username(username)

    def _document_view(self, document: Document) -> DocumentView:
        username, full_name = self._user_names(document.uploaded_by)
        return DocumentView.from_domain(document, username, full_name)

    def _reservation_view(self, reservation: Reservation) -> ReservationView:
        username, _ = self._user_names(reservation.reserved_by)
        return ReservationView.from_domain(reservation, username)

    def _user_names(self, user_id: UUID) -> tuple[str, str]:
        """Username and full name, placeholders for users that were deleted."""
        if not self._core.services.user.has_user(user_id):
            return "unknown", "غير معروف"
        user = self._core.services.user.get_user(user_id)
        return user.username, user.full_name
