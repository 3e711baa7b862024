"""
Exception types used in this library.
"""


class PartitionSpecError(Exception):
    """
    A generated partition table disagrees with the hardware decoding
    specification it is meant to reproduce. These are programming errors and
    are never caught inside :py:mod:`purepart`.
    """


class SubsetLabelError(PartitionSpecError):
    """
    Thrown by the enumerators in :py:mod:`purepart.enumerators` when a raw
    subset label falls outside the range permitted by the format.
    """


class SubsetCountError(PartitionSpecError):
    """
    Thrown by the enumerators in :py:mod:`purepart.enumerators` when a
    canonicalized table uses more than :py:data:`purepart.partition.MAX_SUBSETS`
    distinct subsets.
    """
