"""
Paintshop - minimum-Matte finish assignment.

Chooses Glossy or Matte for every position so that each customer gets at
least one of the finishes they accept, using as few Matte batches as possible.
"""

__version__ = "0.1.0"
__author__ = "Paintshop Development Team"
