from jobledger.db.models.contract import Contract
from jobledger.db.models.job import Job
from jobledger.db.models.profile import Profile

__all__ = [
    "Contract",
    "Job",
    "Profile",
]
