"""
JSON Database Engine - embedded SQL-shaped query engine

A single-process, single-file store that executes parameterized
CREATE TABLE / INSERT / SELECT / UPDATE / DELETE commands against one
JSON document holding every table.
"""

__version__ = "0.1.0"
__author__ = "Systems Engineering Portfolio"
