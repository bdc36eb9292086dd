import uuid

from fastapi import HTTPException, status


def parse_id(value: str, label: str = "ID") -> uuid.UUID:
    """Parse a path identifier, raising 400 ``Invalid <label>`` when malformed."""
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {label}",
        )
