"""LL(1) grammar analysis: left-recursion elimination, FIRST/FOLLOW sets,
predictive tables and a table-driven recognizer."""

__version__ = "0.1.0"
