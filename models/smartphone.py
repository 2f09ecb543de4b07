from sqlalchemy import Column, String, Integer, Numeric, ForeignKey, Index
from sqlalchemy.orm import relationship
from models.base import Base, BigIntegerKey


class Smartphone(Base):
    """
    Destination table for processed smartphone records.
    
    Rows are only ever inserted. The surrogate id follows insertion order,
    so reading back by id reproduces the source order.
    
    Field Mapping (source column -> column):
    - brand -> brand
    - model -> model
    - operating_system -> operating_system
    - release_year -> release_year
    - screen_size -> screen_size
    - price -> price (discounted for models released before 2023)
    """
    __tablename__ = "smartphones"
    
    id = Column(BigIntegerKey, primary_key=True, autoincrement=True)
    
    brand = Column(String(100), nullable=False, index=True)
    model = Column(String(200), nullable=False)
    operating_system = Column(String(100), nullable=False)
    release_year = Column(Integer, nullable=False)
    screen_size = Column(Numeric(5, 2), nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    
    # Run tracking
    etl_run_id = Column(BigIntegerKey, ForeignKey("etl_runs.id"), nullable=True, index=True)
    
    etl_run = relationship("ETLRun", back_populates="smartphones")
    
    __table_args__ = (
        Index("idx_smartphone_brand_model", "brand", "model"),
    )
