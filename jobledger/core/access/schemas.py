from pydantic import BaseModel

from jobledger.common.enums import ProfileRole


class Caller(BaseModel):
    """An authenticated profile and the capabilities granted to it."""

    profile_id: int
    role: ProfileRole
    full_name: str
    can_deposit_for_others: bool = False

    model_config = {"frozen": True}

    def may_deposit_into(self, profile_id: int) -> bool:
        return self.can_deposit_for_others or profile_id == self.profile_id
