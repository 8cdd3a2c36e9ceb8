"""Repository for the Parcel aggregate."""

from logistics.domain import logistics
from logistics.parcel.parcel import Parcel


@logistics.repository(part_of=Parcel)
class ParcelRepository:
    def find_all(self) -> list[Parcel]:
        return self._dao.query.limit(None).all().items

    def find_by_owner(self, owner_client_id: str) -> list[Parcel]:
        return self._dao.query.filter(owner_client_id=str(owner_client_id)).limit(None).all().items

    def find_by_offer_ids(self, offer_ids) -> list[Parcel]:
        wanted = [str(i) for i in offer_ids]
        if not wanted:
            return []
        return self._dao.query.filter(offer_id__in=wanted).limit(None).all().items

    def find_linked(self) -> list[Parcel]:
        return [p for p in self.find_all() if p.offer_id]
