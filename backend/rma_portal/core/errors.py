from __future__ import annotations


class PortalError(RuntimeError):
    user_message: str = "An unexpected error occurred."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.user_message)
        if message:
            self.user_message = message


class InvalidCustomerError(PortalError):
    user_message = "Invalid customer number"


class DuplicateRmaError(PortalError):
    user_message = "RMA number already in use"


class TicketNotFoundError(PortalError):
    user_message = "Support ticket not found"


class RmaGenerationError(PortalError):
    user_message = "RMA number could not be generated. Please try again."


class TicketSubmissionError(PortalError):
    user_message = "The support ticket could not be created. Please try again."


class ArchiveJobError(PortalError):
    user_message = "Auto-archiving failed"


class WizardStateError(PortalError):
    user_message = "The support session is not in a valid state for this action."


class TransitionBlocked(WizardStateError):
    user_message = "The current step is not complete."

    def __init__(self, step: str, missing: list[str]) -> None:
        super().__init__(f"step {step!r} is missing: {', '.join(missing)}")
        self.user_message = type(self).user_message
        self.step = step
        self.missing = missing


class InvalidFormDataError(WizardStateError):
    user_message = "Some of the entered values are invalid."

    def __init__(self, fields: list[str]) -> None:
        super().__init__(f"invalid values for: {', '.join(fields)}")
        self.user_message = type(self).user_message
        self.fields = fields
