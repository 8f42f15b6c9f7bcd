from beanie import Document


class Counter(Document):
    """
    Backing state for the auto-increment allocator.
    One document per collection name; `seq` is the last ID issued.
    """
    id: str  # collection name, e.g. "sales"
    seq: int = 0

    class Settings:
        name = "counters"
