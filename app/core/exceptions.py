from fastapi import HTTPException, status


class NotFoundError(HTTPException):
    """Entity is missing or belongs to another user."""

    def __init__(self, detail: str = "Not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class InvalidSelectionError(HTTPException):
    """Requested shifts or mileage entries cannot be claimed by an invoice."""

    def __init__(self, detail: str = "Invalid selection"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class ImmutableError(HTTPException):
    """Mutation attempted on a locked record."""

    def __init__(self, detail: str = "Record can no longer be modified"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class ValidationError(HTTPException):
    def __init__(self, detail: str = "Invalid input"):
        super().__init__(
            status_code=422,
            detail=detail,
        )
