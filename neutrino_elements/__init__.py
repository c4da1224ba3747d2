"""Light-client building blocks for Elements/Liquid: wire messages, compact block filters, storage interfaces and a filter-based scanner."""

__version__ = "0.1.0"