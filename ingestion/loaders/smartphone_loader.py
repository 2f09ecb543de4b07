"""
Write chunks of smartphone records with one bulk INSERT
"""

from typing import Optional, Sequence
from sqlalchemy import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from core.exceptions import WriteError
from models.smartphone import Smartphone
from schemas.smartphone import SmartphoneRecord
import logging

logger = logging.getLogger(__name__)


class SmartphoneLoader:
    """
    Load records into the smartphones table.
    
    Ensures:
    - One parameterized executemany per chunk, named parameters per record
    - Inserts only, never updates or deletes
    
    The caller owns the session and its transaction; this class never
    commits or rolls back.
    """
    
    table_name = Smartphone.__tablename__
    
    async def write(
        self,
        session: AsyncSession,
        chunk: Sequence[SmartphoneRecord],
        etl_run_id: Optional[int] = None
    ) -> int:
        """
        Insert every record of the chunk.
        
        Args:
            session: Session with an open transaction
            chunk: Records to insert, in source order
            etl_run_id: Run that produced the records
            
        Returns:
            Number of records written
        
        Raises:
            WriteError: If the database rejects the insert
        """
        if not chunk:
            return 0
        
        params = [
            {**record.to_params(), "etl_run_id": etl_run_id}
            for record in chunk
        ]
        
        try:
            await session.execute(insert(Smartphone.__table__), params)
        except SQLAlchemyError as e:
            raise WriteError(
                "Failed to insert chunk",
                context={
                    "operation": "INSERT",
                    "table_name": self.table_name,
                    "chunk_size": len(chunk)
                },
                original_exception=e
            )
        
        logger.debug(f"Inserted {len(params)} rows into {self.table_name}")
        return len(params)
