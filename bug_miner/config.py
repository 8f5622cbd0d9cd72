"""
Configuration and constants for Bug Miner.
"""

import os
import re

# =============================================================================
# FILE DISCOVERY
# =============================================================================

# Comma-separated include globs, matched against file names
DEFAULT_NAMES = [
    name.strip()
    for name in os.environ.get('BUGMINER_NAMES', '*.py').split(',')
    if name.strip()
]

DEFAULT_NAMES_EXCLUDE = []

# Never descend into these, whatever the command line says
ALWAYS_EXCLUDED_DIRS = {'.git'}

# =============================================================================
# BUG DETECTION PATTERNS
# =============================================================================

# Matches: Fix #12, fixes #12, Close #7, closes #7
# Does not match: "Fixed an issue", "See #5 for context"
BUG_FIX_PATTERN = re.compile(r'(Close|Closes|Fix|Fixes)\s+#(\d+)', re.IGNORECASE)

# =============================================================================
# HISTORY WALK
# =============================================================================

# Below this there is no revision with both a predecessor and a successor
MIN_REVISIONS = 3

# =============================================================================
# STRUCTURAL ANALYSIS
# =============================================================================

PYTHON_EXTENSIONS = {'.py', '.pyw'}

# =============================================================================
# REPORTING
# =============================================================================

ENTITY_KINDS = ('file', 'function')

SUMMARY_TOP = 10
