"""Per-user favorite festivals."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class UserFavorites(BaseModel):
    """Festival ids a user saved, in the order they were added.

    ``last_seen_count`` is how many favorites the user had the last time they
    viewed the list; favorites added since then are "unseen".
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    user_id: str
    festival_ids: list[str] = Field(default_factory=list)
    last_seen_count: int = Field(default=0, ge=0)

    @property
    def unseen_count(self) -> int:
        return max(len(self.festival_ids) - self.last_seen_count, 0)
