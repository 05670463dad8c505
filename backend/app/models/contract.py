"""Contract model.

One row per verified contract and network. Rows are written once by the
crawl and never updated; the (network, address) unique constraint is what
makes concurrent or repeated runs safe.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import JSON, Boolean, Index, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.core.base import Base, CreatedAtMixin, UUIDPrimaryKeyMixin


class Contract(UUIDPrimaryKeyMixin, CreatedAtMixin, Base):
    __tablename__ = "contracts"

    network: Mapped[str] = mapped_column(String(64), nullable=False)
    address: Mapped[str] = mapped_column(String(42), nullable=False)

    name: Mapped[str] = mapped_column(Text, nullable=False)
    entrypoint: Mapped[str] = mapped_column(Text, nullable=False)
    compiler: Mapped[str] = mapped_column(Text, nullable=False)
    optimise: Mapped[bool] = mapped_column(Boolean, nullable=False)
    txid: Mapped[str] = mapped_column(String(66), nullable=False)
    constructor_arguments: Mapped[str] = mapped_column(Text, nullable=False, default="")

    # filename -> source text
    sources: Mapped[dict[str, Any]] = mapped_column(JSON().with_variant(JSONB(), "postgresql"), nullable=False)
    abi: Mapped[str] = mapped_column(Text, nullable=False)
    bin: Mapped[str] = mapped_column(Text, nullable=False)

    __table_args__ = (
        UniqueConstraint("network", "address", name="ux_contracts_network_address"),
        Index("ix_contracts_txid", "txid"),
    )
