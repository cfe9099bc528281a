"""
Course Guide: turns course-advising conversation transcripts into
recommended courses matched against the official module catalog.
"""

import logging

logging.getLogger(__name__).addHandler(logging.NullHandler())
