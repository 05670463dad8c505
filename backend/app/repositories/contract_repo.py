"""Contract repository: the store the ingestion controller persists into."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from app.models.contract import Contract
from app.repositories.base import BaseRepository
from ingestion.core.contract_record import ContractRecord


logger = logging.getLogger(__name__)


class ContractRepository(BaseRepository[Contract]):
    """Insert-once access to verified contracts keyed by (network, address)."""

    async def exists_by_address_network(self, address: str, network: str) -> bool:
        stmt = select(Contract.id).where(
            Contract.network == network,
            Contract.address == address.lower(),
        )
        return self._first(stmt) is not None

    async def save(self, record: ContractRecord) -> bool:
        """Insert the record.

        Returns True if inserted, False if (network, address) is already stored,
        including when another run inserted it between lookup and insert.
        Any other integrity failure propagates.
        """
        info = record.info
        row = Contract(
            network=info.network,
            address=info.address,
            name=info.name,
            entrypoint=info.entrypoint,
            compiler=info.compiler_version,
            optimise=info.optimise,
            txid=info.txid,
            constructor_arguments=info.constructor_arguments,
            sources=dict(record.sources),
            abi=record.abi,
            bin=record.bin,
        )
        with self._session_factory() as session:
            try:
                session.add(row)
                session.commit()
            except IntegrityError:
                session.rollback()
                # Only a row stored under the same key means we lost the insert race.
                if not await self.exists_by_address_network(info.address, info.network):
                    raise
                logger.info(f"Contract already stored: {info.network}/{info.address}")
                return False
        return True
