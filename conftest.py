"""
Pytest configuration for project root.

Ensures catalog_service and demo_client can be imported in tests
without installing the project.
"""

import sys
from pathlib import Path

project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))
