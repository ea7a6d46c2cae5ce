from sqlalchemy import Column, Integer, String, Text
from shared.config.database import Base

class KVRecord(Base):
    __tablename__ = "kv_records"
    # One table for every namespace (orders, wallets, products)
    __table_args__ = {"schema": "storefront_schema"}

    namespace = Column(String, primary_key=True)
    key = Column(String, primary_key=True)
    value = Column(Text, nullable=False) # JSON document
    version = Column(Integer, nullable=False, default=1) # bumped on every write, used for CAS
