"""
RecordBlock - Blocking Engine for Entity Resolution

Partitions person, company, address and product records by cheap blocking
keys so that only records sharing a key are compared for duplication.
"""

__version__ = "1.0.0"
__author__ = "RecordBlock Team"
