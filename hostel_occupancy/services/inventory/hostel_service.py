"""
Hostel management: creation, address edits and the rating aggregate.
"""

from typing import List, Optional

from sqlalchemy.orm import Session

from hostel_occupancy.core.exceptions import AuthorizationError, ValidationError
from hostel_occupancy.models.base.enums import UserRole
from hostel_occupancy.models.hostel import Hostel
from hostel_occupancy.repositories.hostel import HostelRepository
from hostel_occupancy.repositories.review import ReviewRepository
from hostel_occupancy.repositories.user import UserRepository
from hostel_occupancy.schemas.hostel import HostelAddressUpdate, HostelCreate
from hostel_occupancy.services.base import BaseService, ServiceResult
from hostel_occupancy.services.common.permissions import (
    Principal,
    require_hostel_manager,
    require_role,
)


class HostelService(BaseService):
    def __init__(self, db_session: Session):
        super().__init__(db_session)
        self.hostel_repository = HostelRepository(db_session)
        self.user_repository = UserRepository(db_session)
        self.review_repository = ReviewRepository(db_session)

    def create_hostel(self, principal: Principal, data: HostelCreate) -> ServiceResult[Hostel]:
        """
        Create a hostel owned by the acting owner.

        Admins may pass ``owner_id`` to create it for an existing owner.
        """

        def unit() -> Hostel:
            require_role(principal, (UserRole.OWNER, UserRole.ADMIN), "create a hostel")

            owner_id = principal.user_id
            if data.owner_id and data.owner_id != principal.user_id:
                if not principal.is_admin:
                    raise AuthorizationError("Only admins may create hostels for other owners", action="create_hostel")
                owner = self.user_repository.get_by_id(data.owner_id)
                if owner.role != UserRole.OWNER:
                    raise ValidationError("Hostel owner must have the owner role", field="owner_id")
                owner_id = owner.id

            hostel = Hostel(owner_id=owner_id, **data.model_dump(exclude={"owner_id"}))
            self.hostel_repository.create(hostel)
            self._log_operation("create_hostel", hostel.id, {"owner_id": owner_id})
            return hostel

        return self._execute("create hostel", unit, message="Hostel created successfully")

    def get_hostel(self, hostel_id: str) -> ServiceResult[Hostel]:
        return self._read("get hostel", lambda: self.hostel_repository.get_by_id(hostel_id), hostel_id)

    def list_hostels(self, owner_id: Optional[str] = None) -> ServiceResult[List[Hostel]]:
        def query() -> List[Hostel]:
            if owner_id:
                return self.hostel_repository.find_by_owner(owner_id)
            return self.hostel_repository.find_by_criteria({}, limit=None, order_by=["name"])

        return self._read("list hostels", query)

    def update_address(
        self,
        principal: Principal,
        hostel_id: str,
        data: HostelAddressUpdate,
    ) -> ServiceResult[Hostel]:
        def unit() -> Hostel:
            hostel = self.hostel_repository.get_by_id(hostel_id)
            require_hostel_manager(principal, hostel, "edit the hostel address")

            for key, value in data.model_dump(exclude_unset=True).items():
                setattr(hostel, key, value)
            self.hostel_repository.flush()
            self._log_operation("update_hostel_address", hostel.id)
            return hostel

        return self._execute("update hostel address", unit, hostel_id, message="Address updated successfully")

    def recompute_rating(self, hostel_id: str) -> Hostel:
        """
        Recompute the hostel's rating aggregate from its reviews.

        Called by whichever component wrote a review, inside that unit.
        """
        hostel = self.hostel_repository.get_by_id(hostel_id)
        average, count = self.review_repository.rating_aggregate(hostel_id)
        hostel.apply_rating(average, count)
        self.hostel_repository.flush()
        self._logger.info(
            "Hostel rating recomputed",
            extra={"hostel_id": hostel_id, "rating_average": str(hostel.rating_average), "rating_count": count},
        )
        return hostel
