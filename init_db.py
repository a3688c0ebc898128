from decimal import Decimal

from core.config import load_settings
from core.db import Database
from models.menu_item import MenuItem

def seed_menu_items(db):
    existing = db.query(MenuItem).first()
    if not existing:
        sample_items = [
            MenuItem(name="Veg Thali", description="Rice, dal, two sabzis, roti, salad.", category="Meals", price=Decimal("150.00"), available_quantity=40),
            MenuItem(name="Chicken Biryani", description="Dum biryani with raita.", category="Meals", price=Decimal("300.00"), available_quantity=25),
            MenuItem(name="Paneer Wrap", description="Grilled paneer, onions, mint chutney.", category="Meals", price=Decimal("120.00"), available_quantity=30),
            MenuItem(name="Samosa", description="Two pieces with tamarind chutney.", category="Snacks", price=Decimal("30.00"), available_quantity=100),
            MenuItem(name="Veg Sandwich", description="Toasted, with cheese.", category="Snacks", price=Decimal("60.00"), available_quantity=50),
            MenuItem(name="Masala Chai", description="Ginger and cardamom tea.", category="Beverages", price=Decimal("20.00"), available_quantity=200),
            MenuItem(name="Cold Coffee", description="Blended with ice cream.", category="Beverages", price=Decimal("80.00"), available_quantity=60),
            MenuItem(name="Gulab Jamun", description="Two pieces, served warm.", category="Desserts", price=Decimal("40.00"), available_quantity=80),
        ]
        db.add_all(sample_items)
        db.commit()
        print("Sample menu items seeded.")
    else:
        print("Menu items already seeded.")

def init_db():
    database = Database.from_settings(load_settings())
    print("Rebuilding database (drop/create)...")
    database.drop_all()
    database.create_all()
    print("All tables created:")
    print("   - menu_items")
    print("   - orders")
    print("   - order_items")
    print("   - billing")
    print("   - audit_logs")

    db = database.SessionLocal()
    try:
        seed_menu_items(db)
    finally:
        db.close()
        database.dispose()

    print("\nDatabase initialization complete!")

if __name__ == "__main__":
    init_db()
