"""Personal finance tracker: transaction store, aggregation and reporting."""

__version__ = "0.1.0"
