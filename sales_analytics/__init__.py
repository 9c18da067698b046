"""
Sales Analytics Reporting

Product and customer reports, rankings, trends and segmentation computed
over a sales star schema snapshot.
"""

__version__ = "1.0.0"
