from hub_status.models.entities import StatusNode

__all__ = [
    "StatusNode",
]
