"""Organization and order repositories."""

from foodies.domain.organization import Order, Organization
from foodies.repositories.base import BaseRepository


class OrganizationRepository(BaseRepository[Organization]):
    model = Organization

    async def find_by_domain(self, domain: str) -> Organization | None:
        # email_domains is a JSON list; portable across SQLite and Postgres
        domain = domain.lower()
        for org in await self.find_all(order_by=("created_at",), descending=False):
            if domain in [d.lower() for d in (org.email_domains or [])]:
                return org
        return None


class OrderRepository(BaseRepository[Order]):
    model = Order

    async def for_deliverers(self, deliverer_ids: list[str]) -> list[Order]:
        if not deliverer_ids:
            return []
        return await self.find_all(deliverer_id=deliverer_ids)
