"""
Pytest configuration and fixtures for riya tests
"""

import pytest

from riya.patterns import BUNDLED_PATTERN_FILE, PatternCatalog, load_catalog


@pytest.fixture
def sample_catalog_data():
    """Small catalog covering a few categories with overlapping patterns"""
    return {
        "categories": {
            "s": {
                "description": "SQL/database files",
                "patterns": [r"\.sql(\.|\?|#|$)", r"\.sqlite(\?|#|$)"],
                "examples": ["https://example.com/db.sql"],
            },
            "b": {
                "description": "Backup and temporary files",
                "patterns": [r"\.bak(\?|#|$)", r"\.old(\?|#|$)"],
                "examples": ["https://example.com/index.php.bak"],
            },
            "c": {
                "description": "Config and environment files",
                "patterns": [r"\.env(\.|\?|#|$)"],
                "examples": ["https://example.com/.env"],
            },
            "k": {
                "description": "Certificate and key files",
                "patterns": [r"\.key(\?|#|$)", r"\.pem(\?|#|$)"],
                "examples": ["https://example.com/server.key"],
            },
            "empty": {
                "description": "Category without patterns",
                "patterns": [],
            },
        }
    }


@pytest.fixture
def sample_catalog(sample_catalog_data):
    return PatternCatalog.from_dict(sample_catalog_data)


@pytest.fixture
def bundled_catalog():
    return load_catalog(str(BUNDLED_PATTERN_FILE))
