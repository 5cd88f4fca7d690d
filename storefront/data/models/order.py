from sqlalchemy import Column, ForeignKey, String, DateTime, Numeric
from sqlalchemy.orm import relationship
from storefront.data.database import Base
from storefront.data.models._common import utcnow, new_id

ORDER_STATUSES = ("pending", "processing", "shipped", "delivered", "cancelled")


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    session_id = Column(String(64), nullable=True, index=True)
    status = Column(String(20), nullable=False, default="pending")  # pending, processing, shipped, delivered, cancelled
    subtotal = Column(Numeric(10, 2), nullable=False)
    shipping = Column(Numeric(10, 2), nullable=False)
    total = Column(Numeric(10, 2), nullable=False)
    #id payment intentu ze stripe, unique = klucz idempotencji webhooka
    payment_id = Column(String(255), nullable=True, unique=True)
    payment_method = Column(String(50), nullable=True)

    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    email = Column(String(255), nullable=True)
    address = Column(String(255), nullable=True)
    city = Column(String(100), nullable=True)
    state = Column(String(100), nullable=True)
    zip_code = Column(String(20), nullable=True)
    country = Column(String(100), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    items = relationship(
        "OrderItemModel",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItemModel.position",
    )
