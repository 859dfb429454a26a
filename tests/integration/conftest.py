#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Pytest fixtures for integration tests.

Provides:
- temp_output_dir: Temporary directory for test outputs
- chapter_file: Sample chapter written to disk
- truncated_outline_file: Outline JSON cut off mid-chapter, written to disk
"""

import pytest
import tempfile
import shutil
from pathlib import Path
import sys

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture
def temp_output_dir():
    """Temporary directory for test outputs."""
    temp_dir = Path(tempfile.mkdtemp(prefix="bookforge_test_"))
    yield temp_dir
    # Cleanup after test
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def chapter_file(temp_output_dir, sample_chapter_latex):
    """Raw model chapter output on disk."""
    path = temp_output_dir / "chapter-1.tex"
    path.write_text(sample_chapter_latex, encoding='utf-8')
    return path


@pytest.fixture
def truncated_outline_file(temp_output_dir, sample_outline_json):
    """Outline JSON that stops inside the second chapter's title."""
    cut = sample_outline_json.index('"Risk') + 5
    path = temp_output_dir / "outline.json"
    path.write_text("```json\n" + sample_outline_json[:cut], encoding='utf-8')
    return path
