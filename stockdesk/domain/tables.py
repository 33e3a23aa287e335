# stockdesk/domain/tables.py
PRODUCTS = "products"
CATEGORIES = "categories"
STOCK_MOVEMENTS = "stock_movements"
BULK_MOVEMENTS = "bulk_movements"

UNCATEGORIZED = "Uncategorized"
