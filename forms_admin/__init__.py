"""Forms Admin: authentication and account lifecycle for the back office"""

__version__ = "0.1.0"
