# models/menu_item.py
from sqlalchemy import Column, Integer, String, Numeric, Boolean, CheckConstraint
from core.db import Base

class MenuItem(Base):
    __tablename__ = "menu_items"
    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_menu_items_price"),
        CheckConstraint("available_quantity >= 0", name="ck_menu_items_available_quantity"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(String)
    category = Column(String)  # Meals, Snacks, Beverages, Desserts
    price = Column(Numeric(10, 2), nullable=False)
    available_quantity = Column(Integer, nullable=False, default=0)
    is_available = Column(Boolean, nullable=False, default=True)
    image_url = Column(String, nullable=True)
