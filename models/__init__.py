# Import every model so relationships resolve and tables register on Base
from models.menu_item import MenuItem
from models.order import Order, OrderItem
from models.billing import Billing
from models.audit_log import AuditLog
