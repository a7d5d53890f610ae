from kanban_tracker.schemas.base import ApiModel


class ProgressTrack(ApiModel):
    """Проценты по станциям, 0..100."""
    assembly_line: int
    assembly_store: int
    fabrication: int


class DelayOntime(ApiModel):
    delay_count: int
    ontime_count: int
    delay_quantity: int
    ontime_quantity: int
    total_quantity: int
