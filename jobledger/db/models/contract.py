from sqlalchemy import CheckConstraint, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from jobledger.common.enums import ContractStatus
from jobledger.db.base import BaseModel


class Contract(BaseModel):
    __tablename__ = "contracts"
    __table_args__ = (
        CheckConstraint("client_id <> contractor_id", name="ck_contracts_distinct_parties"),
        CheckConstraint(
            "status IN ('new', 'in_progress', 'terminated')", name="ck_contracts_status"
        ),
    )

    terms: Mapped[str] = mapped_column(Text, nullable=False, default="")
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ContractStatus.NEW.value, index=True
    )
    client_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("profiles.id"), nullable=False, index=True
    )
    contractor_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("profiles.id"), nullable=False, index=True
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}
