from app.schemas.report import CategoryOut

CATEGORIES: list[CategoryOut] = [
    CategoryOut(id="cat1", name="Roads", color="bg-red-500"),
    CategoryOut(id="cat2", name="Transit", color="bg-blue-500"),
    CategoryOut(id="cat3", name="Parks", color="bg-green-500"),
    CategoryOut(id="cat4", name="Safety", color="bg-orange-500"),
    CategoryOut(id="cat5", name="Housing", color="bg-purple-500"),
    CategoryOut(id="cat6", name="Other", color="bg-gray-500"),
]

_BY_ID = {c.id: c for c in CATEGORIES}

def is_known_category(category_id: str) -> bool:
    return category_id in _BY_ID

def get_category(category_id: str) -> CategoryOut | None:
    return _BY_ID.get(category_id)
