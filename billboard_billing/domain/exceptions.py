"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidAllocation(DomainException):
    """Inputs to a distribution are structurally invalid (NaN, no buckets, negative weights)"""

    pass


class InvalidPolicyError(InvalidAllocation):
    """Distribution policy is malformed or internally contradictory"""

    pass
