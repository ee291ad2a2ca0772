"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class AuthenticationRequired(DomainException):
    """Request carries no authenticated user"""

    pass


class OrganizationIdMissing(DomainException):
    """Caller supplied no organization context"""

    pass


class InvalidIdentifierError(DomainException):
    """Identifier in the request is not well formed"""

    pass


class NotAMember(DomainException):
    """User has no active membership in the organization"""

    pass


class InsufficientPermissions(DomainException):
    """Membership role does not allow the operation"""

    pass


class ResourceNotFoundError(DomainException):
    """Requested record does not exist within the organization"""

    pass


class DuplicateMembershipError(DomainException):
    """User is already a member of the organization"""

    pass


class InvalidMembershipChangeError(DomainException):
    """Membership change is not allowed (e.g. removing yourself)"""

    pass


class InvalidLoanTermsError(DomainException):
    """Loan amount or term cannot be evaluated"""

    pass


class InvalidSaleError(DomainException):
    """Sale quantity, price or total is not a usable number"""

    pass


class InvalidRepaymentError(DomainException):
    """Repayment cannot be applied to the loan"""

    pass


class PartialWriteError(DomainException):
    """A multi-step write failed after its first record was committed"""

    def __init__(self, message: str, orphan_id: str):
        super().__init__(message)
        self.orphan_id = orphan_id
