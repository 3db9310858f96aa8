"""
Pipeline orchestration for RecordBlock.
"""
