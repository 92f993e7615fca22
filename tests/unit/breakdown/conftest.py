"""Shared fixtures for breakdown tests."""

from __future__ import annotations

import pytest

SAMPLE_BREAKDOWN = """**Title: Enroll in BC Healthcare**
**Step 1: Confirm Eligibility** (⏳ 5 min)
* Check BC residency rules.
* Quick check avoids delays.
* Completion cue: ✅ Eligibility confirmed

**Step 2: Gather Documents** (⏳ 10-15 min)
* ID, proof of residency, immigration docs if needed.
* Keep them in one folder.
* Completion cue: ✅ Docs ready to upload

**Step 3: Apply Online** (⏳ 20 min)
* Fill in details and upload docs.
* Completion cue: ✅ Application submitted
"""

SAMPLE_SPLIT = """**Step 1: Find Your Documents** (⏳ 5 min)
* Look in the drawer first.
* Completion cue: Documents found

**Step 2: Put Them in One Folder** (⏳ 5 min)
* Label the folder.
* Completion cue: Folder ready
"""


@pytest.fixture
def sample_breakdown() -> str:
    """A well-formed three-step breakdown response."""
    return SAMPLE_BREAKDOWN


@pytest.fixture
def sample_split() -> str:
    """A well-formed two-step split response."""
    return SAMPLE_SPLIT
