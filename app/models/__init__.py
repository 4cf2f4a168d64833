from .task import CATEGORIES, PRIORITIES, PRIORITY_RANK, Task, format_timestamp

# Export all models for easy importing
__all__ = ["Task", "PRIORITIES", "CATEGORIES", "PRIORITY_RANK", "format_timestamp"]
