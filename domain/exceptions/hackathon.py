from __future__ import annotations
from uuid import UUID
from domain.exceptions.base import NotFound, Conflict, Forbidden, ValidationError


class HackathonNotFound(NotFound):
    def __init__(self, hackathon_id: UUID):
        super().__init__(f"Hackathon not found (id={hackathon_id})")


class HackathonAlreadyExists(Conflict):
    def __init__(self, title: str):
        super().__init__(f"Hackathon already exists (title='{title}')")


class HackathonInvalidDates(ValidationError):
    def __init__(self):
        super().__init__("Invalid dates: start_date must be <= end_date")


class NotHackathonHost(Forbidden):
    def __init__(self, message: str = "Only hosts can manage hackathons"):
        super().__init__(message)
