"""Exceptions raised by the tracker core."""


class TrackerError(Exception):
    """Base class for errors the CLI reports to the user."""


class ParseError(TrackerError):
    """An uploaded timetable could not be read or understood."""
