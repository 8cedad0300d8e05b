"""tablelens - in-memory tabular dashboard engine.

Load a table, derive metrics, and explore it through a filtered, sorted and
paginated view plus chart series whose axes may be resolved from a
natural-language instruction.
"""

__version__ = "0.1.0"
