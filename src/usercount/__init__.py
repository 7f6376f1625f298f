"""usercount: a small HTTP service reporting the row count of user_list."""

__version__ = "1.0.0"
