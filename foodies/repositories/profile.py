"""Profile repository."""

from foodies.domain.profile import Profile
from foodies.repositories.base import BaseRepository


class ProfileRepository(BaseRepository[Profile]):
    model = Profile

    async def get_by_invite_token(self, token: str) -> Profile | None:
        return await self.find_one(invite_token=token)
