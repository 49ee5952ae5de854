# hypertorus/core/errors.py

__all__ = ["InvalidArgument"]


class InvalidArgument(ValueError):
    """A caller broke a precondition of the geometry engine.

    Raised before any output is written, so a buffer passed to a call that
    raised is guaranteed untouched.
    """
